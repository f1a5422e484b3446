from setuptools import setup, find_namespace_packages

setup(
    name="printcost-api",
    version="0.1.0",
    packages=find_namespace_packages(include=["src.printcost*"]),
    include_package_data=True,
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy[asyncio]>=2.0",
        "alembic",
        "psycopg2-binary",
        "asyncpg",
        "pydantic>=2",
        "pydantic-settings",
        "python-dotenv",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt>=4.0,<5",
        "email-validator",
        "python-multipart",
        "pyyaml",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "aiosqlite",
            "httpx",
        ],
    },
)
