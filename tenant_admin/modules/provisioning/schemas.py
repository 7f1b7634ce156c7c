from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class TableInfo(BaseModel):
    table_name: str
    column_count: int = 0
    row_count: int = 0
    table_size: Optional[str] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True


class ColumnInfo(BaseModel):
    column_name: str
    data_type: str
    is_nullable: bool = True
    column_default: Optional[str] = None
    is_primary_key: bool = False

    class Config:
        from_attributes = True


class SchemaSummary(BaseModel):
    schema_name: str
    total_tables: int = 0
    total_size: Optional[str] = None
    created_at: Optional[datetime] = None
    status: Optional[str] = None


class SchemaTableList(BaseModel):
    schema_name: str
    tables: List[TableInfo]


class TableColumnList(BaseModel):
    schema_name: str
    table_name: str
    columns: List[ColumnInfo]
