"""Employee Onboarding - Core application modules.

Provides:
- Document store backends (atomic JSON file, SQLite via SQLAlchemy)
- Streaming CSV decoding
- Email deduplication pipeline and batch committer
- Append-only audit log
- Core utilities: atomic_io, failpoints, paths
"""

__version__ = "0.1.0"
