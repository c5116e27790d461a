from setuptools import setup, find_packages

setup(
    name="warroom",
    version="0.1.0",
    packages=find_packages(include=["warroom", "warroom.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]",
        "pydantic>=2.5",
        "pydantic-settings>=2.7",
        "httpx>=0.27",
        "sqlalchemy[asyncio]>=2.0",
        "aiosqlite",
        "asyncpg",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
)
