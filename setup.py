"""Setup configuration for jellyfin-onboarding."""

from setuptools import setup, find_packages

setup(
    name="jellyfin-onboarding",
    version="0.1.0",
    description="Server discovery and connection validation for the Jellyfin client shell",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
        "psutil>=5.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-mock>=3.10",
            "urllib3>=1.26",
        ],
    },
    entry_points={
        "console_scripts": [
            "jellyfin-onboarding=jellyfin_onboarding.cli:main",
        ],
    },
)
