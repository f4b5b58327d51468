from __future__ import annotations

from pathlib import Path
from setuptools import find_packages, setup

BASE_DIR = Path(__file__).parent
README = (BASE_DIR / "readme.md").read_text(encoding="utf-8") if (BASE_DIR / "readme.md").exists() else ""

setup(
    name="attendance-notifier",
    version="0.1.0",
    description="Scrapes student attendance from the college portal with headless Chrome and sends it over WhatsApp.",
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"attendance_notifier.data": ["migrations/*.sql"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "selenium>=4.13.0",
        "webdriver-manager>=4.0.0",
        "python-dotenv>=1.0.0",
        "twilio>=8.0.0",
        "fastapi>=0.100.0",
        "pydantic>=2.0.0",
        "uvicorn>=0.23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "httpx>=0.24.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "attendance-notifier=attendance_notifier.main:main",
            "attendance-notifier-batch=attendance_notifier.main:batch_entry",
        ]
    },
)
