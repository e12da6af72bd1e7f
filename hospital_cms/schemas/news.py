"""Schemas for news articles (public listing and admin editing)."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class NewsArticleIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=500)
    excerpt: str = Field(default="", max_length=5000)
    content: str = Field(default="")
    image_url: str = Field(default="", max_length=2048, alias="imageUrl")
    external_link: str | None = Field(default=None, max_length=2048, alias="externalLink")
    published_on: date = Field(..., alias="publishedOn")


class NewsArticleOut(NewsArticleIn):
    id: str
    created_at: datetime | None = Field(default=None, alias="createdAt")
