# Root conftest: puts the repository root on sys.path so the flat packages
# (core, behaviors, distributions, engine, analysis) import without installing.
