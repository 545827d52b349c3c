import os

import pytest

from teamctx.config_vars import (
    ConfigVar,
    extract_config_map,
    extract_env_file,
    extract_env_usage,
    is_config_file,
)


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return str(path)


def _assert_lines_point_at_names(path, variables):
    lines = open(path).read().split("\n")
    for var in variables:
        assert var.name in lines[var.line - 1]


@pytest.mark.parametrize(
    "name,expected",
    [
        (".env", True),
        (".env.local", True),
        (".env.custom", True),
        ("config.yaml", True),
        ("application.properties", True),
        ("settings.py", True),
        ("main.go", False),
        ("package.json", False),
    ],
)
def test_is_config_file(name, expected):
    assert is_config_file(name) is expected


def test_extract_env_file(tmp_path):
    path = _write(
        tmp_path / ".env",
        "# database\n\nDB_HOST=localhost\n  PORT=5432  \nnot a valid line\nEMPTY=\n",
    )
    found = extract_env_file(path)
    assert [v.name for v in found] == ["DB_HOST", "PORT", "EMPTY"]
    assert [v.default for v in found] == ["localhost", "5432", ""]
    assert all(v.source == "env" and v.file == path for v in found)
    _assert_lines_point_at_names(path, found)


def test_extract_env_file_missing_raises(tmp_path):
    with pytest.raises(OSError):
        extract_env_file(str(tmp_path / "nope.env"))


def test_extract_env_usage_typescript(tmp_path):
    path = _write(
        tmp_path / "app.ts",
        "const a = process.env.API_URL;\n"
        "const b = process.env['QUEUE_NAME'];\n"
        "const c = process.env.API_URL;\n"
        "const d = configService.get<string>('db.url');\n",
    )
    found = extract_env_usage(path)
    assert [v.name for v in found] == ["API_URL", "QUEUE_NAME", "db.url"]
    sources = {v.name: v.source for v in found}
    assert sources == {"API_URL": "env", "QUEUE_NAME": "env", "db.url": "config"}
    _assert_lines_point_at_names(path, found)


def test_extract_env_usage_go_includes_struct_tags(tmp_path):
    path = _write(
        tmp_path / "main.go",
        'package main\n'
        'var home = os.Getenv("HOME_DIR")\n'
        'v, ok := os.LookupEnv("FEATURE_FLAG")\n'
        'port := viper.GetString("app.port")\n'
        'type Cfg struct {\n'
        '    Level string `env:"LOG_LEVEL"`\n'
        '    Home string `env:"HOME_DIR"`\n'
        '}\n',
    )
    found = extract_env_usage(path)
    assert [v.name for v in found] == ["HOME_DIR", "FEATURE_FLAG", "app.port", "LOG_LEVEL"]
    assert {v.name: v.source for v in found}["app.port"] == "config"
    _assert_lines_point_at_names(path, found)


def test_extract_env_usage_python(tmp_path):
    path = _write(
        tmp_path / "settings_loader.py",
        "import os\nA = os.environ['DATABASE_URL']\nB = os.getenv('CACHE_TTL', '5')\n",
    )
    found = extract_env_usage(path)
    assert [v.name for v in found] == ["DATABASE_URL", "CACHE_TTL"]
    assert all(v.source == "env" for v in found)


def test_extract_env_usage_unknown_extension_finds_nothing(tmp_path):
    path = _write(tmp_path / "script.rb", "ENV['X'] = process.env.X\n")
    assert extract_env_usage(path) == []


def test_config_var_to_dict_omits_empty_fields():
    var = ConfigVar(name="PORT", source="env", file="a.ts", line=3)
    data = var.to_dict()
    assert data == {"name": "PORT", "source": "env", "file": "a.ts", "line": 3}
    with_default = ConfigVar(name="PORT", source="env", default="80", file="a", line=1)
    assert with_default.to_dict()["default"] == "80"


def test_extract_config_map_walks_and_dedupes(tmp_path):
    _write(tmp_path / ".env", "PORT=8080\n")
    _write(tmp_path / "src" / "app.ts", "listen(process.env.PORT, process.env.HOST_NAME);\n")
    _write(tmp_path / "config.yaml", "key: value\n")
    _write(tmp_path / "node_modules" / "lib" / "x.ts", "process.env.HIDDEN_VAR\n")
    _write(tmp_path / "README.md", "process.env.DOC_VAR\n")

    result = extract_config_map(str(tmp_path))
    names = [v.name for v in result.env_vars]
    assert names == ["PORT", "HOST_NAME"]
    port = result.env_vars[0]
    assert port.default == "8080"
    assert os.path.basename(port.file) == ".env"
    bases = sorted(os.path.basename(p) for p in result.config_files)
    assert bases == [".env", "config.yaml"]
    assert result.to_dict()["config_files"] == result.config_files


def test_extract_config_map_missing_directory_is_empty(tmp_path):
    result = extract_config_map(str(tmp_path / "missing"))
    assert result.env_vars == [] and result.config_files == []