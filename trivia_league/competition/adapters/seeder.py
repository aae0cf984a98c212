import json
import os

from trivia_league.competition.domain.models import Competition, Question
from trivia_league.competition.domain.ports import ICompetitionRepository
from trivia_league.shared.telemetry import Telemetry

# Seed file shape:
#   {"competitions": [{"id": ..., "name": ...}], "questions": [{...}, ...]}
# A bare list is read as questions only.
# `is_empty()` is not part of ICompetitionRepository; both adapters provide
# it and the seeder checks for it with hasattr.


class DataSeeder:
    """
    Responsible for populating the repository with initial data.
    """

    def __init__(self, repo: ICompetitionRepository) -> None:
        self.repo = repo
        self.telemetry = Telemetry("DataSeeder")

    def seed_if_empty(
        self, seed_file: str = "data/seed_competition_questions.json"
    ) -> int:
        """
        Loads competitions and questions from JSON when the repository is empty.

        Returns:
            Number of questions seeded (0 when nothing was done).
        """
        try:
            if hasattr(self.repo, "is_empty") and not self.repo.is_empty():
                return 0

            if not os.path.exists(seed_file):
                self.telemetry.log_warning("Seed file not found", path=seed_file)
                return 0

            self.telemetry.log_info("Repository appears empty. Attempting to seed...")

            with open(seed_file, encoding="utf-8") as f:
                data = json.load(f)

            if isinstance(data, list):
                data = {"questions": data}

            for raw in data.get("competitions", []):
                self.repo.save_competition(Competition(**raw))

            questions = [Question(**q) for q in data.get("questions", [])]
            self.repo.seed_questions(questions)
            self.telemetry.log_info(f"Seeded {len(questions)} questions.")
            return len(questions)
        except (OSError, ValueError) as e:
            self.telemetry.log_error("Auto-seeding failed", e)
            return 0
