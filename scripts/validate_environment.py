#!/usr/bin/env python3
"""Check that the local environment can run the reservation API."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from importlib.metadata import version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kino.repository.data_repository import DataRepository
from kino.services.pricing_service import ReservationPricingService
from kino.utils.config import get_settings

SEPARATOR_LINE = "=" * 44

EXPECTED_DEMO_SEATS = 180

REQUIRED_ADJUSTMENTS = ("fee3D", "feeRuntime", "largeGroup", "smallGroup")


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="kino-env-")

    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            database_path=Path(temp_dir) / "kino_validation.db",
        )
        repository = DataRepository(validation_settings)

        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        try:
            repository.seed_demo_data()
            seat_count = len(repository.get_seats_by_ids(range(1, EXPECTED_DEMO_SEATS + 50)))
            if seat_count != EXPECTED_DEMO_SEATS:
                raise RuntimeError(f"expected {EXPECTED_DEMO_SEATS} seats, got {seat_count}")
            names = {item.name for item in repository.list_price_adjustments()}
            missing = sorted(set(REQUIRED_ADJUSTMENTS) - names)
            if missing:
                raise RuntimeError(f"missing adjustments: {', '.join(missing)}")
            ok, line = _print_result(f"Demo cinema: {seat_count} seats", True)
        except Exception as exc:
            ok, line = _print_result("Demo cinema", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        try:
            pricing_service = ReservationPricingService(
                repository=repository,
                settings=validation_settings,
            )
            result = pricing_service.calculate_reservation_price(
                screening_id=1,
                seat_ids=[25, 26],
            )
            if result.total != result.seats_subtotal + result.fees - result.discount:
                raise RuntimeError("total does not reconcile with its components")
            ok, line = _print_result(
                "Reservation pricing",
                True,
                f": subtotal={result.seats_subtotal} total={result.total}",
            )
        except Exception as exc:
            ok, line = _print_result("Reservation pricing", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Kino Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
