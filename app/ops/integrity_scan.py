from __future__ import annotations

import argparse
import json
import sys
from collections import Counter
from dataclasses import asdict

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.ops.integrity_checks import IntegrityFinding, repair_capacity_drift, resolve_stores, run_integrity_checks
from app.tcg.core.config import settings


def _serialize_findings(findings: list[IntegrityFinding]) -> list[dict]:
    return [asdict(finding) for finding in findings]


def _summarize(findings: list[IntegrityFinding]) -> dict:
    counts = Counter(f.severity for f in findings)
    return {
        "total": len(findings),
        "critical": counts.get("CRITICAL", 0),
        "warn": counts.get("WARN", 0),
    }


def _format_text(summary: dict, findings: list[IntegrityFinding], repaired: list[str]) -> str:
    lines = [
        "Integrity Scan Report",
        f"Total findings: {summary['total']}",
        f"CRITICAL: {summary['critical']}",
        f"WARN: {summary['warn']}",
        "",
    ]
    for finding in findings:
        lines.append(
            f"[{finding.severity}] {finding.check_id} store={finding.store_id} "
            f"entity={finding.entity} id={finding.entity_id or '-'} {finding.message}"
        )
        if finding.details:
            lines.append(f"  details={json.dumps(finding.details, default=str)}")
    if repaired:
        lines.append("")
        lines.append(f"Recalculated capacity for: {', '.join(repaired)}")
    return "\n".join(lines)


def run_scan(
    store: str,
    output_format: str,
    fail_on_critical: bool,
    *,
    repair: bool = False,
    database_url: str | None = None,
) -> int:
    if not settings.OPS_ENABLE_INTEGRITY_SCAN:
        print("Integrity scan disabled by OPS_ENABLE_INTEGRITY_SCAN.", file=sys.stderr)
        return 2
    engine = create_engine(database_url or settings.DATABASE_URL, future=True)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    try:
        with SessionLocal() as db:
            try:
                store_ids = resolve_stores(db, store)
            except ValueError as exc:
                print(str(exc), file=sys.stderr)
                return 2
            findings: list[IntegrityFinding] = []
            for store_id in store_ids:
                findings.extend(run_integrity_checks(db, store_id))
            repaired = repair_capacity_drift(db, findings) if repair else []
    finally:
        engine.dispose()
    summary = _summarize(findings)
    output = {
        "summary": summary,
        "findings": _serialize_findings(findings),
        "repaired": repaired,
    }
    if output_format == "json":
        print(json.dumps(output, indent=2, default=str))
    else:
        print(_format_text(summary, findings, repaired))
    if fail_on_critical and summary["critical"] > 0:
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="TCG inventory capacity integrity scan")
    parser.add_argument("--store", required=True, help="Store ID or 'all'")
    parser.add_argument("--format", choices=["json", "text"], default="text")
    parser.add_argument("--fail-on-critical", action="store_true")
    parser.add_argument("--repair", action="store_true", help="Recalculate stores whose capacity drifted")
    args = parser.parse_args(argv)
    return run_scan(args.store, args.format, args.fail_on_critical, repair=args.repair)


if __name__ == "__main__":
    raise SystemExit(main())
