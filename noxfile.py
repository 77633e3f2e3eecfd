import nox

nox.needs_version = ">=2024.4.15"
nox.options.default_venv_backend = "uv|virtualenv"


@nox.session(python=["3.9", "3.10", "3.11", "3.12", "3.13"])
def tests(session: nox.Session) -> None:
    session.install("-e.[test]")
    session.run("pytest", "--timeout=30", "tests", *session.posargs)


@nox.session
@nox.parametrize("editable", [True, False])
def install(session: nox.Session, editable: bool) -> None:
    session.install("-e." if editable else ".")
    # The package must import without any of the test dependencies.
    out = session.run("python", "-c", "import urlform; print(urlform.decode_form(b'a=1'))", silent=True)
    assert "FormResult({'a': b'1'})" in out
