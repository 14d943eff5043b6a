# API endpoints
from . import admissions, audit, auth, exams, faculty, fees, grievances, health, leaves, students, thesis

__all__ = ["admissions", "audit", "auth", "exams", "faculty", "fees", "grievances", "health", "leaves", "students", "thesis"]
