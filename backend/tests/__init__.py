"""
JLPT Study Test Suite

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures and configuration
    └── unit/                # Unit tests (isolated, no external dependencies)
        ├── test_sm2.py              # SM-2 scheduling rules
        ├── test_quiz_grader.py      # Quiz scoring rules
        ├── test_vocabulary_service.py
        ├── test_grammar_service.py
        ├── test_quiz_service.py
        ├── test_progress_service.py
        ├── test_learning_models.py  # Schemas, enums and errors
        ├── test_db_base.py          # Engine options, sessions and schema
        └── test_config.py           # Configuration loading tests

Running Tests:
    # Run all tests
    pytest tests/ -v

    # Run with coverage
    pytest tests/ --cov=app --cov-report=html
"""
