from .hackathon_service import HackathonService
from .judging import JudgingService
from .review import ReviewService
from .rewards import RewardsService

__all__ = ["HackathonService", "JudgingService", "ReviewService", "RewardsService"]
