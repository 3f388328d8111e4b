from pydantic import BaseModel, Field


class NewsSearchParams(BaseModel):
    query: str | None = Field(default=None, description="Topic to search headlines for; omit for top stories")
    when: int | None = Field(default=None, ge=1, description="Only headlines from the last N hours")
    limit: int = Field(default=10, ge=1, le=50)


class Headline(BaseModel):
    title: str
    tinyurl: str
