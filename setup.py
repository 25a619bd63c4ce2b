from setuptools import setup, find_packages

setup(
    name="deltaone-scorecard",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*", "alembic", "alembic.*"]),
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "alembic",
        "psycopg2-binary",
        "redis",
        "celery",
        "croniter",
        "prometheus-client",
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
