from setuptools import setup, find_packages


# Core dependencies that are always needed
CORE_DEPS = [
    "PyPDF2>=3.0.1",  # Required for reading, writing and outlining PDFs
    "pydantic>=2.5.0",  # TOC entry models
    "globalog>=0.1.0",
    "typer>=0.12.0",
    "typing_extensions>=4.8.0",
    "mistralai>=1.7.0,<2",  # Required for AI-assisted TOC extraction
]

# Optional dependencies for specific features
EXTRAS = {
    "dev": [
        "pytest>=8.3.5",
        "flake8>=7.2.0",
        "mypy>=1.15.0",
        "black>=25.1.0",
    ],
}


setup(
    name="tocedit",
    version="0.1.0",
    description="Edit the table of contents of PDF files and write it as a bookmark tree",
    author="tocedit Team",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=CORE_DEPS,
    extras_require=EXTRAS,
    entry_points={
        "console_scripts": [
            "tocedit=tocedit.cli:app",
        ],
    },
)
