[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "protoschema"
version = "1.4.0"
description = "Build JSON Schema documents from Protocol Buffers descriptors"
requires-python = ">=3.10"
dependencies = [
    "protobuf",
]
keywords = ["protobuf", "descriptor", "json-schema", "jsonschema", "code-generation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Code Generators",
    "Topic :: File Formats :: JSON :: JSON Schema",
]

[project.optional-dependencies]
test = [
    "pytest",
    "jsonschema",
]

[tool.hatch.build.targets.wheel]
packages = ["protoschema"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
