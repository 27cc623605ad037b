"""Document types and file helpers shared by the tests."""

from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict

from configcrunch import DocReference, YamlConfigDocument, variable_helper


class Command(YamlConfigDocument):
    @classmethod
    def header(cls) -> str:
        return "command"

    @classmethod
    def schema(cls):
        return CommandSchema


class Service(YamlConfigDocument):
    @classmethod
    def header(cls) -> str:
        return "service"

    @classmethod
    def schema(cls):
        return ServiceSchema

    @classmethod
    def subdocuments(cls):
        return [("commands[]", Command)]

    @variable_helper
    def image_name(self) -> str:
        return str(self["image"]).split(":")[0]

    @variable_helper
    def explode(self):
        raise RuntimeError("helper failed")


class Project(YamlConfigDocument):
    @classmethod
    def header(cls) -> str:
        return "project"

    @classmethod
    def schema(cls):
        return ProjectSchema

    @classmethod
    def subdocuments(cls):
        return [("services[]", Service), ("app/commands[]", Command)]

    @variable_helper
    def upper(self, value: Any) -> str:
        return str(value).upper()


class Unfinished(YamlConfigDocument):
    @classmethod
    def header(cls) -> str:
        return "unfinished"


class Headerless(YamlConfigDocument):
    pass


class CommandSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    run: str
    aliases: List[str] = []


class ServiceSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    image: str
    port: Optional[int] = None
    roles: List[str] = []
    environment: Dict[str, Any] = {}
    commands: Dict[str, Command] = {}


class AppSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    commands: Dict[str, Annotated[Any, DocReference(Command)]] = {}


class ProjectSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    description: Optional[str] = None
    services: Dict[str, Annotated[Any, DocReference(Service)]] = {}
    app: Optional[AppSchema] = None
    extra: Dict[str, Any] = {}


def write_doc(directory: Path, relative: str, header: str, body: Any) -> Path:
    """Write ``{header: body}`` as YAML to ``directory/relative`` and return the path."""
    path = directory / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump({header: body}, sort_keys=False), encoding="utf-8")
    return path
