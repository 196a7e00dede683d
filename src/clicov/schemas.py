"""Report schemas

Serializable shapes of a coverage report. Field aliases are the stable
camelCase key names consumed by CI tooling.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from enum import Enum


# ===== Enums =====

class Priority(str, Enum):
    """Recommendation priority"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class ReportFormat(str, Enum):
    """Output formats of the report generator"""
    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"
    HTML = "html"
    YAML = "yaml"


CATEGORIES = ("commands", "subcommands", "flags", "options", "overall")


# ===== Coverage Schemas =====

class CoverageRecord(BaseModel):
    """Tested/total counts of one category"""
    total: int = Field(default=0, ge=0)
    tested: int = Field(default=0, ge=0)

    @property
    def percentage(self) -> float:
        # An empty surface is trivially fully covered
        if self.total == 0:
            return 100.0
        return 100.0 * self.tested / self.total

    def add(self, tested: bool) -> None:
        self.total += 1
        if tested:
            self.tested += 1

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "tested": self.tested, "percentage": round(self.percentage, 2)}


class ArgDetail(BaseModel):
    """Per-argument entry of the command breakdown"""
    name: str
    type: str
    description: str = ""
    tested: bool = False
    aliases: List[str] = Field(default_factory=list)


class CommandDetail(BaseModel):
    """Per-command entry of the report, keyed by its full path"""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    path: str
    description: str = ""
    tested: bool = False
    test_files: List[str] = Field(default_factory=list, alias="testFiles")
    flags: List[ArgDetail] = Field(default_factory=list)
    options: List[ArgDetail] = Field(default_factory=list)
    source_file: Optional[str] = Field(default=None, alias="sourceFile")
    source_line: Optional[int] = Field(default=None, alias="sourceLine")
    imported_from: Optional[str] = Field(default=None, alias="importedFrom")


class Recommendation(BaseModel):
    """One actionable gap"""
    type: str = Field(..., description="command, subcommand, flag, option or coverage")
    priority: Priority
    target: str
    message: str
    example: Optional[str] = Field(default=None, description="Ready-to-paste test snippet")


class WarningEntry(BaseModel):
    """A recoverable anomaly carried into the report"""
    kind: str
    message: str
    file: Optional[str] = None
    line: Optional[int] = None


class ReportMetadata(BaseModel):
    """Provenance of a report; the timestamp is the only time-dependent value"""
    model_config = ConfigDict(populate_by_name=True)

    analyzed_at: str = Field(..., alias="analyzedAt")
    cli_path: str = Field(..., alias="cliPath")
    test_dir: str = Field(..., alias="testDir")
    analysis_method: str = Field(default="AST-based", alias="analysisMethod")
    total_test_files: int = Field(default=0, alias="totalTestFiles")
    total_patterns: int = Field(default=0, alias="totalPatterns")


class CoverageReport(BaseModel):
    """Complete machine-readable coverage report"""
    summary: Dict[str, Dict[str, Any]]
    commands: Dict[str, CommandDetail] = Field(default_factory=dict)
    recommendations: List[Recommendation] = Field(default_factory=list)
    warnings: List[WarningEntry] = Field(default_factory=list)
    metadata: ReportMetadata

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
