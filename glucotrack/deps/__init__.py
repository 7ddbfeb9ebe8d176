# Marks `glucotrack.deps` as a package so `from glucotrack.deps.access import ...` works.
