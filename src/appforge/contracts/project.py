from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class ProjectStatus(str, Enum):
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


class TechStack(str, Enum):
    """Target technology choices for a generated project."""

    REACT_TYPESCRIPT = "react-typescript"
    VUE_TYPESCRIPT = "vue-typescript"
    NEXTJS = "nextjs"
    NODEJS_EXPRESS = "nodejs-express"
    PYTHON_FASTAPI = "python-fastapi"
    FULLSTACK_REACT = "fullstack-react"

    @property
    def label(self) -> str:
        return TECH_STACK_LABELS[self]


TECH_STACK_LABELS = {
    TechStack.REACT_TYPESCRIPT: "React + TypeScript",
    TechStack.VUE_TYPESCRIPT: "Vue + TypeScript",
    TechStack.NEXTJS: "Next.js",
    TechStack.NODEJS_EXPRESS: "Node.js + Express",
    TechStack.PYTHON_FASTAPI: "Python + FastAPI",
    TechStack.FULLSTACK_REACT: "Full-Stack React",
}


class _CamelModel(BaseModel):
    """Persisted records use camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Project(_CamelModel):
    """A user's app-generation request and its resulting artifacts."""

    id: str = ""
    name: str
    description: str = ""
    tech_stack: TechStack
    status: ProjectStatus = ProjectStatus.GENERATING
    user_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    generated_code: str | None = None
    preview_url: str | None = None

    def to_record(self) -> dict:
        """Serialize into the persisted camelCase shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProjectUpdate(_CamelModel):
    """Partial project update. Unset fields are left untouched."""

    name: str | None = None
    description: str | None = None
    tech_stack: TechStack | None = None
    status: ProjectStatus | None = None
    generated_code: str | None = None
    preview_url: str | None = None

    @field_validator("name", "description", "tech_stack", "status")
    @classmethod
    def reject_null(cls, v):
        """Required project fields can be changed but never cleared."""
        if v is None:
            raise ValueError("field cannot be set to null")
        return v
