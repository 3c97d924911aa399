"""Setup configuration for romcleaner - ROM identification and deduplication tool."""

from setuptools import setup, find_packages
import os
import re

# Read requirements from requirements.txt
def read_requirements():
    """
    Return the non-empty, non-comment lines of requirements.txt.
    """
    requirements_path = os.path.join(os.path.dirname(__file__), "requirements.txt")
    with open(requirements_path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip() and not line.startswith("#")]

# Read long description from README.md
def read_readme():
    """
    Return README.md as a string, or an empty string if it is missing.
    """
    readme_path = os.path.join(os.path.dirname(__file__), "README.md")
    if os.path.exists(readme_path):
        with open(readme_path, "r", encoding="utf-8") as f:
            return f.read()
    return ""


# Read version from romcleaner/cli.py (single source of truth)
def read_version():
    """
    Extract the ``__version__`` string assigned in romcleaner/cli.py.

    Raises:
        RuntimeError: If no __version__ assignment is found.
    """
    cli_path = os.path.join(os.path.dirname(__file__), "romcleaner", "cli.py")
    with open(cli_path, "r", encoding="utf-8") as f:
        content = f.read()
    match = re.search(r'^__version__\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE)
    if match:
        return match.group(1)
    raise RuntimeError("Unable to find __version__ in romcleaner/cli.py")


setup(
    name="romcleaner",
    version=read_version(),
    description="ROM identification and deduplication against DAT catalogs using CRC32",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    author="ROM Cleaner Team",
    license="MIT",
    python_requires=">=3.9",
    install_requires=read_requirements(),
    extras_require={
        "test": ["pytest>=7.0"],
    },
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={
        "console_scripts": [
            "romcleaner=romcleaner.cli:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Archiving",
        "Topic :: Utilities",
    ],
    keywords="rom dat clrmamepro crc32 deduplication emulation",
)
