"""Test suite for entity doubles.

Organized into three categories:

1. core/: Unit tests for definitions, resolver builders, guardrails,
   type synthesis and the orchestrating factory
   - No back-end dependencies, fast execution
   - Uses the recording fake back-end

2. adapters/: Behavior tests run against every back-end
   - The same suite runs on the mock and the fake back-end

3. fakes/: Port implementations for testing
   - Recording back-end used by core tests
"""
