import json
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class StepResult:
    id: str
    status: str
    detail: Optional[str] = None
    entities: int = 0
    relationships: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class Manifest:
    run_id: str
    org_url: str
    account_key: Optional[str]
    started_at: str
    steps: List[StepResult] = field(default_factory=list)
    finished_at: Optional[str] = None
    schema_version: str = "0.1.0"

    @classmethod
    def new(cls, org_url: str, account_key: Optional[str] = None) -> "Manifest":
        return cls(
            run_id=str(uuid.uuid4()),
            org_url=org_url,
            account_key=account_key,
            started_at=datetime.now(timezone.utc).isoformat(),
        )

    def add_step(
        self,
        step_id: str,
        status: str,
        detail: Optional[str] = None,
        entities: int = 0,
        relationships: int = 0,
        errors: Optional[List[str]] = None,
    ) -> None:
        self.steps.append(
            StepResult(
                id=step_id,
                status=status,
                detail=detail,
                entities=entities,
                relationships=relationships,
                errors=errors or [],
            )
        )

    def step(self, step_id: str) -> Optional[StepResult]:
        return next((s for s in self.steps if s.id == step_id), None)

    @property
    def failed(self) -> bool:
        return any(s.status == "error" for s in self.steps)

    def finish(self) -> None:
        self.finished_at = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
