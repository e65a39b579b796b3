import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Deal, Song
from ..services import ai_service
from ..services.ai_service import AIUnavailableError
from ..shared.errors import route_errors

logger = logging.getLogger(__name__)
router = APIRouter(tags=["AI"])


class ProjectBrief(BaseModel):
    title: str
    description: str
    projectType: str
    targetAudience: Optional[str] = None
    sceneDescription: Optional[str] = None
    desiredMood: Optional[str] = None
    targetDemographics: Optional[str] = None


class SongBrief(BaseModel):
    id: Optional[int] = None
    title: str
    artist: str
    lyrics: Optional[str] = None
    genre: Optional[str] = None
    mood: Optional[str] = None
    tempo: Optional[int] = None
    key: Optional[str] = None
    energy: Optional[str] = None
    instrumentalDescription: Optional[str] = None


class SmartPitchRequest(BaseModel):
    projectBrief: ProjectBrief
    songs: Optional[list[SongBrief]] = None
    songIds: Optional[list[int]] = None


class SyncAnalysis(BaseModel):
    suitability: float
    reasoning: str
    sceneMatches: list[Any]
    emotionalTones: list[Any]
    narrativeElements: list[Any]
    recommendedUsage: list[Any]
    targetDemographics: list[Any]
    similarReferences: list[Any]
    themes: list[Any]
    seasonality: list[Any]
    occasions: list[Any]


class PitchRecommendation(BaseModel):
    songId: Optional[int] = None
    songTitle: str
    matchScore: float
    analysis: SyncAnalysis


class LyricsRequest(BaseModel):
    lyrics: Optional[str] = None
    songId: Optional[int] = None


class LyricsAnalysis(BaseModel):
    themes: list[Any]
    emotions: list[Any]
    narrative: str
    marketability: float
    syncPotential: list[Any]


class ContractDealData(BaseModel):
    songTitle: Optional[str] = None
    artist: Optional[str] = None
    licenseType: Optional[str] = None
    territory: Optional[str] = None
    term: Optional[str] = None
    fee: Optional[float] = None
    usage: Optional[str] = None
    clientName: Optional[str] = None
    projectTitle: Optional[str] = None


class ContractRequest(BaseModel):
    dealData: Optional[ContractDealData] = None
    dealId: Optional[int] = None
    templateType: Optional[str] = "standard"


class ContractResponse(BaseModel):
    contract: str


def _ai_unavailable(e: AIUnavailableError) -> HTTPException:
    logger.warning(f"⚠️ AI request refused: {e}")
    return HTTPException(status_code=503, detail="AI features are not configured")


def _song_brief(song: Song) -> dict:
    return {
        "id": song.id,
        "title": song.title,
        "artist": song.artist,
        "lyrics": song.lyrics,
        "genre": song.genre,
        "mood": song.mood,
        "tempo": song.tempo or song.bpm,
        "key": song.key,
        "instrumentalDescription": song.description,
    }


def _deal_contract_data(deal: Deal) -> dict:
    """Contract inputs pulled from a stored deal"""
    fee = deal.deal_value or deal.our_fee or deal.full_song_value
    return {
        "songTitle": deal.song.title if deal.song else None,
        "artist": deal.song.artist if deal.song else deal.artist,
        "licenseType": deal.usage or deal.project_type,
        "territory": deal.territory,
        "term": deal.term,
        "fee": float(fee) if fee is not None else None,
        "usage": deal.usage,
        "clientName": deal.licensee_company_name or (deal.contact.company or deal.contact.name if deal.contact else None),
        "projectTitle": deal.project_name,
    }


@router.post("/smart-pitch-analyze", response_model=list[PitchRecommendation])
async def smart_pitch_analyze(data: SmartPitchRequest, db: Session = Depends(get_db)):
    """Rank candidate songs for a project brief"""
    songs = [s.model_dump() for s in data.songs or []]
    if data.songIds:
        songs.extend(_song_brief(s) for s in db.query(Song).filter(Song.id.in_(data.songIds)).all())
    if not songs:
        raise HTTPException(status_code=400, detail="Provide songs or songIds to analyze")

    with route_errors("generate recommendations"):
        try:
            return await ai_service.generate_pitch_recommendations(songs, data.projectBrief.model_dump())
        except AIUnavailableError as e:
            raise _ai_unavailable(e)


@router.post("/analyze-lyrics", response_model=LyricsAnalysis)
async def analyze_lyrics(data: LyricsRequest, db: Session = Depends(get_db)):
    lyrics = data.lyrics
    if not lyrics and data.songId:
        song = db.query(Song).filter(Song.id == data.songId).first()
        if not song:
            raise HTTPException(status_code=404, detail="Song not found")
        lyrics = song.lyrics
    if not lyrics:
        raise HTTPException(status_code=400, detail="Lyrics are required")

    with route_errors("analyze lyrics"):
        try:
            return await ai_service.analyze_lyrics(lyrics)
        except AIUnavailableError as e:
            raise _ai_unavailable(e)


@router.post("/generate-contract", response_model=ContractResponse)
async def generate_contract(data: ContractRequest, db: Session = Depends(get_db)):
    """Draft a contract from explicit deal terms or a stored deal"""
    if data.dealData is not None:
        deal_data = data.dealData.model_dump()
    elif data.dealId:
        deal = db.query(Deal).filter(Deal.id == data.dealId).first()
        if not deal:
            raise HTTPException(status_code=404, detail="Deal not found")
        deal_data = _deal_contract_data(deal)
    else:
        raise HTTPException(status_code=400, detail="Either dealData or dealId is required")

    with route_errors("generate contract"):
        try:
            contract = await ai_service.generate_contract(deal_data, data.templateType)
        except AIUnavailableError as e:
            raise _ai_unavailable(e)
        return {"contract": contract}
