"""ORM model for news articles shown on the public site."""

from sqlalchemy import Column, Date, String, Text

from hospital_cms.models.base import Base, TimestampMixin, new_id


class NewsArticle(TimestampMixin, Base):
    __tablename__ = "news_articles"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(500), nullable=False)
    excerpt = Column(Text, nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    image_url = Column(String(2048), nullable=False, default="")
    external_link = Column(String(2048), nullable=True)
    published_on = Column(Date, nullable=False, index=True)
