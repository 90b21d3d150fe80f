"""Shared fixtures for l2wp tests."""
import json
import zipfile

import pytest


INDEX_PAGE = """import { Button } from "@/components/ui/button";

const Index = () => {
  return (
    <main>
      <section className="hero">
        <h1 className="title">Welcome <span>home</span></h1>
        <p className="lead">Build faster.</p>
        <Button>Get started</Button>
      </section>
      <section className="features">
        <div>{items.map(i => <Card key={i} />)}</div>
      </section>
    </main>
  );
};

export default Index;
"""

ABOUT_PAGE = """const About = () => <div className="about">About us</div>;
export default About;
"""

CONTACT_FORM = """export const ContactForm = () => <form onSubmit={handle}><input /></form>;
"""

INDEX_CSS = """@import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;700&display=swap');
@tailwind base;
@tailwind components;

@layer base {
  :root {
    --background: 0 0% 100%;
    --primary: 142 50% 45%;
    --radius: 0.5rem;
  }
}

body {
  font-family: 'Inter', sans-serif;
}

.empty {}
"""

PACKAGE_JSON = {
    "name": "demo-site",
    "version": "0.1.0",
    "dependencies": {"react": "^18.3.1", "react-hook-form": "^7.53.0"},
    "devDependencies": {"vite": "^5.4.1"},
}

PROJECT_STRUCTURE = {
    "proyecto": {
        "nombre": "Demo Site",
        "descripcion": "A demo landing page",
        "tecnologias": ["React", "Vite"],
        "diseño": {"colores": {"primary": "#39ac63"}},
    }
}

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def project_files() -> dict:
    """File name -> content for a small but complete Lovable export."""
    return {
        "package.json": json.dumps(PACKAGE_JSON),
        "project-structure.json": json.dumps(PROJECT_STRUCTURE),
        "index.html": "<!doctype html><div id=\"root\"></div>",
        "vite.config.ts": "export default {}\n",
        "src/pages/Index.tsx": INDEX_PAGE,
        "src/pages/About.tsx": ABOUT_PAGE,
        "src/components/ContactForm.tsx": CONTACT_FORM,
        "src/index.css": INDEX_CSS,
        "public/logo.png": PNG_BYTES,
    }


def write_zip(path, files: dict, prefix: str = ""):
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            zf.writestr(prefix + name, content)
    return path


@pytest.fixture(autouse=True)
def l2wp_home(tmp_path, monkeypatch):
    """Point every l2wp data path at a temporary directory.

    Tests never touch real config or data: L2WP_HOME is the data dir and
    both config file locations live under tmp_path.
    """
    home = tmp_path / "l2wp-data"
    home.mkdir()

    for var in (
        "L2WP_MAX_ZIP_MB", "L2WP_TEMP_DIR", "L2WP_CACHE_TTL", "L2WP_SIGNATURES",
        "L2WP_PRO_ACTIVE", "L2WP_FIELD_ACF", "L2WP_FIELD_JET", "L2WP_FIELD_MB",
        "L2WP_FIELDS_FILE", "L2WP_PLAIN", "L2WP_DEBUG",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("L2WP_HOME", str(home))

    monkeypatch.setattr(
        "l2wp.core.config_service._global_config_path",
        lambda: tmp_path / "global-config" / "config.toml",
    )
    monkeypatch.setattr(
        "l2wp.core.config_service._project_config_path",
        lambda: tmp_path / ".l2wp.toml",
    )

    from l2wp import ui
    from l2wp.core.config_service import reset_config_service
    from l2wp.providers import reset_providers

    reset_config_service()
    reset_providers()
    ui.set_plain_mode(False)
    ui.set_json_mode(False)
    yield home
    reset_config_service()
    reset_providers()
    ui.set_json_mode(False)


@pytest.fixture
def project_zip(tmp_path):
    """A valid Lovable project archive."""
    return write_zip(tmp_path / "demo.zip", project_files())


@pytest.fixture
def demo_files():
    """A fresh, mutable copy of the demo project's files."""
    return project_files()


@pytest.fixture
def make_zip(tmp_path):
    """Build an archive from ``files`` (default: the demo project)."""
    def _make(files=None, name="project.zip", prefix=""):
        return write_zip(tmp_path / name, project_files() if files is None else files, prefix)
    return _make


@pytest.fixture
def project_dir(tmp_path):
    """The same project, unpacked."""
    root = tmp_path / "demo"
    for name, content in project_files().items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def signatures():
    from l2wp.detection.signatures import load_signatures
    return load_signatures()
