# src/generator/payloads.py
# Type-dependent event payloads: one schema per event type, empty document otherwise.


###### IMPORT TOOLS ######
# global imports
import random
import string
from typing import Callable, Dict, Optional, Tuple, Type
from faker import Faker
from pydantic import BaseModel, ConfigDict, Field
from pydantic.dataclasses import dataclass

# local imports
from src.generator.catalog import (
    CLICK,
    DOWNLOAD,
    FILE_NAME_POOL_SIZE,
    FORM_SUBMIT,
    PAGE_URL_POOL_SIZE,
    REFERRER_POOL_SIZE,
    VIDEO_PLAY,
    WORD_POOL_SIZE,
)


ALPHANUMERIC = string.ascii_lowercase + string.digits


###### PAYLOAD SCHEMAS ######
class EmptyPayload(BaseModel):
    """Page views and unknown event types carry no properties."""
    model_config = ConfigDict(extra="forbid")


class ClickPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")
    button_id: str = Field(..., min_length=1)
    value: float = Field(..., ge=0, le=100)


class FormSubmitPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")
    form_id: str = Field(..., min_length=1)
    fields: int = Field(..., ge=1, le=10)


class VideoPlayPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")
    video_id: str = Field(..., min_length=10, max_length=10)
    duration: int = Field(..., ge=30, le=600)


class DownloadPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")
    file_name: str = Field(..., min_length=1)
    size: int = Field(..., ge=1024, le=10_485_760)


PAYLOAD_SCHEMAS: Dict[str, Type[BaseModel]] = {
    CLICK: ClickPayload,
    FORM_SUBMIT: FormSubmitPayload,
    VIDEO_PLAY: VideoPlayPayload,
    DOWNLOAD: DownloadPayload,
}


def payload_schema(event_type: str) -> Type[BaseModel]:
    """Schema a payload of this event type must satisfy."""
    return PAYLOAD_SCHEMAS.get(event_type, EmptyPayload)


###### TEXT POOLS ######
@dataclass(frozen=True)
class TextPools:
    """Faker-produced strings, generated once and then sampled per event."""
    page_urls: Tuple[str, ...]
    referrers: Tuple[str, ...]
    words: Tuple[str, ...]
    file_names: Tuple[str, ...]

    @classmethod
    def from_faker(cls, seed: Optional[int] = None, faker: Optional[Faker] = None) -> "TextPools":
        fake = faker or Faker()
        if seed is not None:
            fake.seed_instance(seed)
        return cls(
            page_urls=tuple(fake.url() + fake.uri_path() for _ in range(PAGE_URL_POOL_SIZE)),
            referrers=tuple(fake.url() for _ in range(REFERRER_POOL_SIZE)),
            words=tuple(fake.word() for _ in range(WORD_POOL_SIZE)),
            file_names=tuple(fake.file_name() for _ in range(FILE_NAME_POOL_SIZE)),
        )


###### PAYLOAD BUILDERS ######
def _click(rng: random.Random, pools: TextPools) -> ClickPayload:
    return ClickPayload(button_id=rng.choice(pools.words), value=round(rng.uniform(0, 100), 2))


def _form_submit(rng: random.Random, pools: TextPools) -> FormSubmitPayload:
    return FormSubmitPayload(form_id=rng.choice(pools.words), fields=rng.randint(1, 10))


def _video_play(rng: random.Random, pools: TextPools) -> VideoPlayPayload:
    return VideoPlayPayload(video_id="".join(rng.choices(ALPHANUMERIC, k=10)), duration=rng.randint(30, 600))


def _download(rng: random.Random, pools: TextPools) -> DownloadPayload:
    return DownloadPayload(file_name=rng.choice(pools.file_names), size=rng.randint(1024, 10_485_760))


def _empty(rng: random.Random, pools: TextPools) -> EmptyPayload:
    return EmptyPayload()


_BUILDERS: Dict[str, Callable[[random.Random, TextPools], BaseModel]] = {
    CLICK: _click,
    FORM_SUBMIT: _form_submit,
    VIDEO_PLAY: _video_play,
    DOWNLOAD: _download,
}


def build_payload(event_type: str, rng: random.Random, pools: TextPools) -> BaseModel:
    '''Build the payload for an event type; unmatched types get an empty document.'''
    return _BUILDERS.get(event_type, _empty)(rng, pools)
