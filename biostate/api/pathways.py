from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field

from biostate.db import get_db
from biostate.engine.pathways import Enzyme, check_stack_interactions, get_enzyme_info
from biostate.services import repository

router = APIRouter()


class PathwayCheckRequest(BaseModel):
    substance_names: List[str] = Field(..., min_length=1)


class PathwayInteractionResponse(BaseModel):
    enzyme: str
    substrate: str
    modulator: str
    effect: str
    strength: str
    description: str
    clinical_note: Optional[str] = None
    research_url: Optional[str] = None


class PathwayEntryResponse(BaseModel):
    substance_name: str
    strength: str
    clinical_note: Optional[str] = None
    research_url: Optional[str] = None


class EnzymeResponse(BaseModel):
    name: str
    description: str
    common_substrates: str
    substrates: List[PathwayEntryResponse]
    inhibitors: List[PathwayEntryResponse]
    inducers: List[PathwayEntryResponse]


def _entry_dict(entry) -> dict:
    return {
        "substance_name": entry.substance_name,
        "strength": entry.strength.value,
        "clinical_note": entry.clinical_note,
        "research_url": entry.research_url,
    }


@router.post("/check", response_model=List[PathwayInteractionResponse])
def check_pathways(request: PathwayCheckRequest, db: Session = Depends(get_db)):
    """
    Check CYP450 interactions across a list of substance names.
    Each substrate/modulator/enzyme combination is reported once.
    """
    table = repository.get_pathway_table(db)
    return [i.to_dict() for i in check_stack_interactions(table, request.substance_names)]


@router.get("/enzymes/{enzyme}", response_model=EnzymeResponse)
def get_enzyme(enzyme: Enzyme, db: Session = Depends(get_db)):
    """Enzyme description plus every known substrate, inhibitor and inducer."""
    table = repository.get_pathway_table(db)
    info = get_enzyme_info(enzyme)
    return {
        "name": info.name,
        "description": info.description,
        "common_substrates": info.common_substrates,
        "substrates": [_entry_dict(e) for e in table.substrates_for(enzyme)],
        "inhibitors": [_entry_dict(e) for e in table.inhibitors_for(enzyme)],
        "inducers": [_entry_dict(e) for e in table.inducers_for(enzyme)],
    }
