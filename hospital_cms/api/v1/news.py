"""News articles: public listing, editing restricted to ADMIN and SUPER_ADMIN."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hospital_cms.api.v1.auth import require_content_editor
from hospital_cms.core.database import get_db
from hospital_cms.models import NewsArticle
from hospital_cms.schemas.auth import CurrentUser, MessageResponse
from hospital_cms.schemas.news import NewsArticleIn, NewsArticleOut
from hospital_cms.services.audit import AuditLogger

router = APIRouter()


def _to_out(article: NewsArticle) -> NewsArticleOut:
    return NewsArticleOut(
        id=article.id,
        title=article.title,
        excerpt=article.excerpt,
        content=article.content,
        image_url=article.image_url,
        external_link=article.external_link,
        published_on=article.published_on,
        created_at=article.created_at,
    )


def _get_article(db: Session, news_id: str) -> NewsArticle:
    article = db.query(NewsArticle).filter(NewsArticle.id == news_id).first()
    if article is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="News article not found")
    return article


@router.get("", response_model=list[NewsArticleOut])
def list_news(db: Annotated[Session, Depends(get_db)]) -> list[NewsArticleOut]:
    articles = (
        db.query(NewsArticle)
        .order_by(NewsArticle.published_on.desc(), NewsArticle.created_at.desc())
        .all()
    )
    return [_to_out(a) for a in articles]


@router.post("", response_model=NewsArticleOut, status_code=status.HTTP_201_CREATED)
def create_news(
    body: NewsArticleIn,
    editor: Annotated[CurrentUser, Depends(require_content_editor)],
    db: Annotated[Session, Depends(get_db)],
) -> NewsArticleOut:
    article = NewsArticle(**body.model_dump())
    db.add(article)
    db.commit()
    db.refresh(article)
    out = _to_out(article)
    AuditLogger(db).record("CREATE", "NEWS", f"Created news: {out.title}", editor.username)
    return out


@router.put("/{news_id}", response_model=NewsArticleOut)
def update_news(
    news_id: str,
    body: NewsArticleIn,
    editor: Annotated[CurrentUser, Depends(require_content_editor)],
    db: Annotated[Session, Depends(get_db)],
) -> NewsArticleOut:
    article = _get_article(db, news_id)
    for field, value in body.model_dump().items():
        setattr(article, field, value)
    db.commit()
    db.refresh(article)
    out = _to_out(article)
    AuditLogger(db).record("UPDATE", "NEWS", f"Updated news: {out.title}", editor.username)
    return out


@router.delete("/{news_id}", response_model=MessageResponse)
def delete_news(
    news_id: str,
    editor: Annotated[CurrentUser, Depends(require_content_editor)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    article = _get_article(db, news_id)
    title = article.title
    db.delete(article)
    db.commit()
    AuditLogger(db).record("DELETE", "NEWS", f"Deleted news: {title}", editor.username)
    return MessageResponse(message="News deleted")
