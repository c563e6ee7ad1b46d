"""HoneyShare — synthetic audit activity for a fake file-sharing service.

Packages
────────
  contracts — AuditEvent and reference entities shared by all modules
  shared    — logging, YAML config, settings, RNG seeding
  store     — SQLAlchemy models, engine setup and AuditStore
  simulator — generators, synthesizer, scheduler, attack injector, replay
  analyzer  — pandas activity summary + report CLI
"""

__version__ = "0.3.0"
