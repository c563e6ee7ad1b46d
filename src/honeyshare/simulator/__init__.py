"""HoneyShare audit simulator.

Modules
───────
  generators  — random names, IPs, user agents, file names, dates
  reference   — bounded recent users/files for attribution
  synthesizer — spike flag + reference data -> one AuditEvent (or none)
  clock       — asyncio clock for live runs, manual clock for replays
  scheduler   — AuditSimulator: steady ticks, spike cycle, retention sweep
  attack      — one-shot download bursts from a single spoofed origin
  seeding     — reference data population
  replay      — offline runs on simulated time + CSV/JSONL writers
  cli         — argparse entry-point
"""
