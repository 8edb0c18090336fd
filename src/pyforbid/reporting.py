from __future__ import annotations
from dataclasses import dataclass, asdict
import json

from .analyzer import Diagnostic
from .source import SourceFile, get_line

@dataclass
class Finding:
    rule_id: str
    category: str
    path: str
    line: int
    col: int
    message: str
    evidence: str = ""

def finding_from_diagnostic(diag: Diagnostic, src: SourceFile | None = None) -> Finding:
    evidence = get_line(src.lines, diag.position.line).strip() if src is not None else ""
    return Finding(
        rule_id="FORBIDDEN",
        category=diag.category,
        path=diag.position.path,
        line=diag.position.line,
        col=diag.position.col,
        message=diag.message,
        evidence=evidence,
    )

class Reporter:
    def __init__(self) -> None:
        self.findings: list[Finding] = []
        self.files_checked = 0
    def add(self, f: Finding) -> None:
        self.findings.append(f)
    def to_jsonl(self) -> str:
        return "\n".join(json.dumps(asdict(f), ensure_ascii=False) for f in self.findings)
    def render_human(self) -> str:
        by_path: dict[str, int] = {}
        for f in self.findings:
            by_path[f.path] = by_path.get(f.path, 0) + 1

        out: list[str] = []
        for f in self.findings:
            loc = f"{f.path}:{f.line}:{f.col}"
            out.append(f"{loc}: {f.message} ({f.category})")
            if f.evidence:
                out.append(f"    evidence: {f.evidence[:220]}")
        if out:
            out.append("")
        out.append(
            f"Findings: {len(self.findings)} in {len(by_path)} file(s), "
            f"{self.files_checked} file(s) checked"
        )
        return "\n".join(out)
