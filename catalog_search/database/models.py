# catalog_search/database/models.py
"""
SQLAlchemy models for the metadata catalog relations read by advanced search.

The catalog schema is owned by the ingestion side; these declarations mirror
the columns the search compiler references so that development databases and
tests can create the relations with ``Base.metadata.create_all``.

Models:
    - Dataset: dict_dataset, one row per dataset
    - DatasetField: dict_field_detail, one row per dataset field
    - DatasetComment: comments, dataset-level annotations
    - FieldComment: field_comments, field-level annotation text
    - DatasetFieldComment: dict_dataset_field_comment, field -> comment link
    - Application: cfg_application
    - Flow: flow, scheduler flows per application
    - FlowJob: flow_job, jobs belonging to a flow
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, Index, Integer, String, Text

from .base import Base


class Dataset(Base):
    """
    Dataset dictionary entry.

    Attributes:
        id: Dataset identifier
        name: Dataset (table) name
        dataset_schema: Serialized schema text (column is named ``schema``)
        source: Source platform (Teradata, Hdfs, ...)
        urn: Unique resource name, e.g. ``hdfs://data/tracking/PageViewEvent``
        parent_name: Scope the dataset lives in (database / directory)
        source_modified_time: Unix timestamp of the last source change
    """

    __tablename__ = "dict_dataset"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False, index=True)
    dataset_schema = Column("schema", Text, nullable=True)
    source = Column(String(50), nullable=True, index=True)
    urn = Column(String(200), nullable=False, unique=True)
    parent_name = Column(String(200), nullable=True, index=True)
    source_modified_time = Column(BigInteger, nullable=True)

    def __repr__(self) -> str:
        return f"<Dataset(id={self.id}, name={self.name}, urn={self.urn})>"


class DatasetField(Base):
    __tablename__ = "dict_field_detail"

    field_id = Column(Integer, primary_key=True)
    dataset_id = Column(Integer, nullable=False, index=True)
    field_name = Column(String(100), nullable=False)

    __table_args__ = (Index("ix_field_detail_dataset_field", "dataset_id", "field_name"),)


class DatasetComment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    dataset_id = Column(Integer, nullable=False, index=True)
    text = Column(Text, nullable=False)


class FieldComment(Base):
    __tablename__ = "field_comments"

    id = Column(Integer, primary_key=True)
    comment = Column(Text, nullable=False)


class DatasetFieldComment(Base):
    __tablename__ = "dict_dataset_field_comment"

    field_id = Column(Integer, primary_key=True)
    comment_id = Column(Integer, primary_key=True)
    dataset_id = Column(Integer, nullable=False, index=True)


class Application(Base):
    __tablename__ = "cfg_application"

    app_id = Column(Integer, primary_key=True)
    app_code = Column(String(128), nullable=False, unique=True)


class Flow(Base):
    """
    Scheduler flow.

    Attributes:
        app_id: Owning application
        flow_id: Flow identifier (unique per application)
        flow_name: Flow name
        flow_path: Path of the flow inside the scheduler
        flow_group: Project / group the flow belongs to
    """

    __tablename__ = "flow"

    app_id = Column(Integer, primary_key=True)
    flow_id = Column(Integer, primary_key=True)
    flow_name = Column(String(255), nullable=True, index=True)
    flow_path = Column(String(1024), nullable=True)
    flow_group = Column(String(255), nullable=True)


class FlowJob(Base):
    __tablename__ = "flow_job"

    app_id = Column(Integer, primary_key=True)
    job_id = Column(Integer, primary_key=True)
    flow_id = Column(Integer, nullable=False, index=True)
    job_name = Column(String(255), nullable=True, index=True)
    job_path = Column(String(1024), nullable=True)
    job_type = Column(String(63), nullable=True)
