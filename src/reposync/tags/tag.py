from dataclasses import dataclass

TAG_REF_PREFIX = "refs/tags/"
PEELED_SUFFIX = "^{}"


@dataclass(frozen=True)
class RemoteTag:
    name: str
    sha: str


def parse_ls_remote(output: str) -> list[RemoteTag]:
    """Parse the output of ``git ls-remote --tags``.

    Annotated tags are listed twice, once for the tag object and once peeled
    (``name^{}``) for the commit it points to; the peeled sha wins.
    """
    shas: dict[str, str] = {}
    peeled: set[str] = set()

    for line in output.splitlines():
        parts = line.strip().split("\t")
        if len(parts) != 2:
            continue

        sha, ref = parts
        if not ref.startswith(TAG_REF_PREFIX):
            continue

        name = ref[len(TAG_REF_PREFIX) :]
        if name.endswith(PEELED_SUFFIX):
            name = name[: -len(PEELED_SUFFIX)]
            shas[name] = sha
            peeled.add(name)
        elif name not in peeled:
            shas[name] = sha

    return [RemoteTag(name=name, sha=sha) for name, sha in shas.items() if name]
