"""Activity summary over stored audit events.

Modules
───────
  summary — pandas frames: per-type counts, top origins, per-minute rate
  cli     — argparse entry-point printing the summary
"""
