from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from core.errors import CatalogError
from core.models import Job, MCOption, MCQuestion, Scenario
from core.settings import DEFAULT_DATA_DIR

logger = logging.getLogger(__name__)

QUESTION_BANK_FILE = "assessment_questions.json"
SAMPLE_JOBS_FILE = "sample_jobs.json"


@dataclass(frozen=True)
class QuestionBank:
    questions: tuple[MCQuestion, ...]
    scenarios: tuple[Scenario, ...]


def _read_json(path: Path):
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Cannot read {path}: {exc}") from exc


def _question(item: dict) -> MCQuestion:
    return MCQuestion(
        id=item["id"],
        question=item["question"],
        options=tuple(
            MCOption(id=opt["id"], text=opt["text"], points=int(opt["points"]))
            for opt in item["options"]
        ),
    )


def _scenario(item: dict) -> Scenario:
    return Scenario(
        id=item["id"],
        title=item["title"],
        prompt=item["prompt"],
        key_words=tuple(item.get("key_words", ())),
        min_words=int(item.get("min_words", 100)),
        max_words=int(item.get("max_words", 150)),
    )


def load_question_bank(data_dir: Path = DEFAULT_DATA_DIR) -> QuestionBank:
    path = Path(data_dir) / QUESTION_BANK_FILE
    raw = _read_json(path)
    try:
        bank = QuestionBank(
            questions=tuple(_question(item) for item in raw["questions"]),
            scenarios=tuple(_scenario(item) for item in raw["scenarios"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CatalogError(f"Malformed question bank {path}: {exc!r}") from exc
    logger.info("Loaded %d questions and %d scenarios from %s", len(bank.questions), len(bank.scenarios), path)
    return bank


def load_jobs(data_dir: Path = DEFAULT_DATA_DIR) -> list[Job]:
    path = Path(data_dir) / SAMPLE_JOBS_FILE
    raw = _read_json(path)
    try:
        jobs = [Job.from_dict(item) for item in raw]
    except (AttributeError, KeyError, TypeError) as exc:
        raise CatalogError(f"Malformed job catalog {path}: {exc!r}") from exc
    logger.info("Loaded %d jobs from %s", len(jobs), path)
    return jobs
