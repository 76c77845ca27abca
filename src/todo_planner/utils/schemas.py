import json
from dataclasses import dataclass
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, JsonValue


class PlanStep(BaseModel):
    """One tool call proposed by the model.

    Wire shape: ``{"function": ..., "description": ..., "input": {...}}``.
    ``parameters`` and ``variables`` are accepted in place of ``input``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    function_name: str = Field(..., alias="function", description="Name of the tool to call.")
    description: Optional[str] = None
    variables: Optional[Dict[str, JsonValue]] = Field(
        default=None,
        validation_alias=AliasChoices("input", "parameters", "variables"),
        serialization_alias="input",
    )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        variables = json.dumps(self.variables, ensure_ascii=False) if self.variables is not None else "null"
        return (
            f"{{ function='{self.function_name}', "
            f"description='{self.description or ''}', "
            f"variables={variables}}}"
        )


class Plan(BaseModel):
    steps: List[PlanStep] = Field(default_factory=list)


@dataclass(frozen=True)
class ExecutionRecord:
    index: int
    step: PlanStep
    result: str

    def format(self) -> str:
        return f"Plan {self.index}{self.step}\nResult : {self.result}"
