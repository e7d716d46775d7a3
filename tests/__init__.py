"""
RefactorRPG Test Suite
======================

Test Organization
-----------------
- tests/unit/          : Fast isolated tests (classifier, dedup, engines, config, events)
- tests/unit/domain/   : Pure domain model and formula tests
- tests/integration/   : Fully wired GameSession tests (YAML on disk, env overrides)

Testing Philosophy
------------------
- Real collaborators by default; mocks only for listeners and sinks
- Time is controlled through the FakeClock fixture
- Use pytest markers to categorize and selectively run tests
- Follow AAA pattern: Arrange, Act, Assert
"""
