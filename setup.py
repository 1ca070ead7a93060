from pathlib import Path

from setuptools import find_packages, setup

# Load packages from requirements.txt
BASE_DIR = Path(__file__).parent
with open(Path(BASE_DIR, "requirements.txt")) as file:
    required_packages = [ln.strip() for ln in file.readlines() if ln.strip()]

# Define our package
setup(
    name="adaptive-exam",
    version="0.1",
    description="Adaptive assessment engine with tiered difficulty and session state tracking",
    python_requires=">=3.10",
    packages=find_packages(include=["adaptive_exam", "adaptive_exam.*"]),
    package_data={"adaptive_exam": ["schemas/*.json"]},
    install_requires=required_packages,
    extras_require={
        "dev": ["pre-commit==2.19.0"],
        "test": ["pytest>=7.0"],
    },
)
