[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ymsynth"
version = "0.1.0"
description = "Register-level model of a YM2612 FM synthesizer with formatting helpers and a text parameter panel"
requires-python = ">=3.10"
dependencies = []
keywords = ["ym2612", "opn2", "fm", "synthesizer", "registers", "mega drive"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ymsynth"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
