"""Service layer for the progress engine"""
from momentum.services.container import ServiceContainer, get_container, init_container, build_store
from momentum.services.gamification_service import GamificationService

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "build_store",
    "GamificationService",
]
