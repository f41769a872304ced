from setuptools import find_packages, setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="git-mirror-sync",
    version="1.0.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="One-way mirroring of git repositories with history filtering",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/git-mirror-sync",
    packages=find_packages(),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        "python-dotenv>=1.0,<2.0",
        "pydantic>=2.0.0,<3.0.0",
        "pandas>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.3.1",
        ],
        "dev": [
            "black>=23.3.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
            "mypy>=1.3.0",
            "pre-commit>=3.3.2",
            "pytest>=7.3.1",
            "pytest-cov>=4.1.0",
            "bandit>=1.7.5",
        ],
    },
    entry_points={
        "console_scripts": [
            "git-mirror-sync=git_mirror_sync.cli.main:main",
            "git-mirror-sync-verify=git_mirror_sync.cli.commands.verify_command:main",
            "git-mirror-sync-setup=git_mirror_sync.setup_env:setup",
        ],
    },
)
