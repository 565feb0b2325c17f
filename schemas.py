"""
Schemas for Puddy Pictures

Each Pydantic model describes a request body or a stored document.
Stored collections:
- "reviews"       -> list of Review
- "registrations" -> list of Registration
- "weekly-movie"  -> a single MovieInfo (with code)
"""
from typing import Optional, List, Literal
from pydantic import BaseModel, ConfigDict, Field


class CategorySelections(BaseModel):
    """Spinner selections; anything missing is picked at random"""
    region: Optional[str] = None
    genre: Optional[str] = None
    decade: Optional[str] = None
    budget: Optional[str] = None


class MovieSuggestion(BaseModel):
    """
    The JSON object the language model is asked to reply with.
    Extra keys are kept so nothing the model adds is lost.
    """
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    title: str
    year: Optional[str] = None
    country: Optional[str] = None
    director: Optional[str] = None
    description: Optional[str] = None
    watch_info: Optional[str] = None


class MovieInfo(MovieSuggestion):
    """
    A suggestion tagged with its categories, poster and review code
    Collection: "weekly-movie" once published
    """
    region: str
    genre: str
    decade: str
    budget: str
    release_year: Optional[str] = None
    poster_url: str = Field("", description="OMDb poster URL or empty string")
    code: Optional[str] = Field(None, description="6-character review code")


class Review(BaseModel):
    """
    Reviews collection schema
    Collection: "reviews"
    """
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from", description="Sender phone number")
    to: Optional[str] = None
    code: Optional[str] = Field(None, description="Upper-cased review code, if the SMS had one")
    review: str
    raw: str = Field(..., description="Unmodified SMS body")
    timestamp: str


class Registration(BaseModel):
    """
    Registrations collection schema
    Collection: "registrations"
    """
    name: str
    phone: str
    consent: bool = True
    date: str


class WittyIntroRequest(BaseModel):
    movie: Optional[dict] = None


class SendResultsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    contacts: List[str] = Field(default_factory=list)
    image: str = Field(..., description="PNG as a data URL or bare base64")
    poster_url: Optional[str] = Field(None, alias="posterUrl")


class DispatchResult(BaseModel):
    contact: str
    status: Literal["email sent", "sms sent", "error"]
    error: Optional[str] = None
