"""
CodeQuest — Points Engine for Developer Activity Gamification
==============================================================
Turns Azure DevOps activity (check-ins, pull requests, reviews, bug fixes,
story closures) into points through per-company configurable rules,
including a modifier for AI-generated code, and tracks level progression.

Package layout::

    codequest/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Point bounds, modifier bounds, id formats
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # ORM models (points configs, history, audit)
    │   └── seed.py        # Default points config for new companies
    ├── engine/
    │   ├── activities.py  # ActivityKind registry + default base points
    │   ├── points_config.py # PointsConfig value object
    │   ├── resolver.py    # Global → company → organization resolution
    │   ├── points.py      # Points calculation + audit trace
    │   ├── validator.py   # Batch configuration validation
    │   ├── levels.py      # Level thresholds + progress
    │   └── cache.py       # Short-TTL resolved-config cache
    ├── services/
    │   ├── config_service.py  # Versioned, audited config reads/writes
    │   └── points_service.py  # Award points, history, progress
    └── api/
        ├── main.py        # FastAPI app
        └── routes/        # Points + configuration endpoints
"""

__version__ = "0.1.0"
