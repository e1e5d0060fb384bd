"""
Overlap Resolver — Non-Overlapping Fragment Set

Rules, applied to each candidate against the accepted set:
  - tag vs output: the tag wins (outer syntax over an inner expression)
  - otherwise: the strictly longer span wins; ties keep the accepted one
"""

from __future__ import annotations

from liquidlens.scanner import OUTPUT, TAG, Fragment


def resolve_overlaps(fragments: list[Fragment]) -> list[Fragment]:
    """Ordered by start, pairwise non-overlapping."""
    if len(fragments) <= 1:
        return list(fragments)

    resolved: list[Fragment] = []
    for candidate in sorted(fragments, key=lambda f: f.start):
        keep = True
        # Walk backwards so deletions do not disturb the remaining indices
        for i in range(len(resolved) - 1, -1, -1):
            existing = resolved[i]
            if not candidate.overlaps(existing):
                continue

            if candidate.kind == TAG and existing.kind == OUTPUT:
                del resolved[i]
                continue
            if candidate.kind == OUTPUT and existing.kind == TAG:
                keep = False
                break

            if candidate.length > existing.length:
                del resolved[i]
                continue
            keep = False
            break

        if keep:
            resolved.append(candidate)

    resolved.sort(key=lambda f: f.start)
    return resolved
