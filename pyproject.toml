[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "voxsay"
version = "1.6.4"
description = "Convert text to 16-bit mono WAV speech through a pluggable speech engine backend"
requires-python = ">=3.10"
dependencies = []
keywords = ["tts", "text-to-speech", "speech", "wav", "pcm"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Speech",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
voxin-say = "voxsay.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["voxsay"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
