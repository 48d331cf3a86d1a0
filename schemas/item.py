from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _required_text(value: str, field: str, max_len: int = 512) -> str:
    text = (value or "").strip()
    if not text or len(text) > max_len:
        raise ValueError(f"{field} must be 1-{max_len} characters")
    return text


class ItemCreate(BaseModel):
    market_hash_name: str
    en_name: str
    cn_name: str
    name_id: int = Field(gt=0)

    @field_validator("market_hash_name")
    @classmethod
    def validate_market_hash_name(cls, value: str) -> str:
        return _required_text(value, "market_hash_name")

    @field_validator("en_name")
    @classmethod
    def validate_en_name(cls, value: str) -> str:
        return _required_text(value, "en_name")

    @field_validator("cn_name")
    @classmethod
    def validate_cn_name(cls, value: str) -> str:
        return _required_text(value, "cn_name")


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    market_hash_name: str
    en_name: str
    cn_name: str
    name_id: int


class ItemImportRequest(BaseModel):
    json_data: str

    @field_validator("json_data")
    @classmethod
    def validate_json_data(cls, value: str) -> str:
        if not (value or "").strip():
            raise ValueError("json_data must not be empty")
        return value


class ImportResult(BaseModel):
    imported_count: int
    skipped_count: int
    skipped_items: List[str] = Field(default_factory=list)
    total_items: int
