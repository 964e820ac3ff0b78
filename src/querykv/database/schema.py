from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class RecordRow(Base):
    __tablename__ = "records"

    record_key = Column(String, primary_key=True)
    created_at_utc = Column(String, nullable=False)  # ISO 8601 string
    updated_at_utc = Column(String, nullable=False)  # ISO 8601 string


class AttributeRow(Base):
    __tablename__ = "record_attributes"

    record_key = Column(
        String,
        ForeignKey("records.record_key"),
        primary_key=True,
    )
    name = Column(String, primary_key=True)
    kind = Column(String, nullable=False)  # text, number, boolean, null, mapping
    value_json = Column(Text, nullable=False)

    __table_args__ = (
        Index("idx_record_attributes_name", "name"),
    )
