"""External collaborators (network, processes, prompts, clock).

Each module defines an ABC and the production implementation. Fakes for
tests live in tests/fakes/.
"""
