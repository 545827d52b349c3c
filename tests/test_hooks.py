import os
import stat

import pytest

from teamctx.hooks import (
    HOOK_MARKER,
    POST_COMMIT_HOOK_SCRIPT,
    HookError,
    InstallResult,
    find_git_root,
    install_post_commit_hook,
    strip_hook_section,
    uninstall_post_commit_hook,
)


@pytest.fixture
def repo(tmp_path):
    (tmp_path / ".teamcontext").mkdir()
    (tmp_path / ".git").mkdir()
    return tmp_path


def hook_file(root):
    return root / ".git" / "hooks" / "post-commit"


def test_install_fresh_hook(repo):
    assert install_post_commit_hook(repo) is InstallResult.INSTALLED
    path = hook_file(repo)
    assert path.read_text() == POST_COMMIT_HOOK_SCRIPT
    assert os.stat(path).st_mode & stat.S_IXUSR


def test_install_twice_reports_already_installed(repo):
    install_post_commit_hook(repo)
    assert install_post_commit_hook(repo) is InstallResult.ALREADY_INSTALLED
    assert hook_file(repo).read_text().count(HOOK_MARKER) == 1


def test_install_requires_teamcontext_dir(tmp_path):
    with pytest.raises(HookError):
        install_post_commit_hook(tmp_path)


def test_install_appends_to_foreign_hook(repo):
    path = hook_file(repo)
    path.parent.mkdir(parents=True)
    foreign = "#!/bin/sh\necho existing"
    path.write_text(foreign)
    assert install_post_commit_hook(repo) is InstallResult.APPENDED
    content = path.read_text()
    assert content.startswith(foreign + "\n\n")
    assert content.endswith(POST_COMMIT_HOOK_SCRIPT)


def test_uninstall_removes_fresh_hook_file(repo):
    install_post_commit_hook(repo)
    assert uninstall_post_commit_hook(repo) is True
    assert not hook_file(repo).exists()


def test_uninstall_keeps_foreign_part(repo):
    path = hook_file(repo)
    path.parent.mkdir(parents=True)
    foreign = "#!/bin/sh\necho existing"
    path.write_text(foreign)
    install_post_commit_hook(repo)
    assert uninstall_post_commit_hook(repo) is False
    content = path.read_text()
    assert HOOK_MARKER not in content
    assert "echo existing" in content
    assert content.endswith("\n")


def test_uninstall_without_hook_file(repo):
    with pytest.raises(HookError):
        uninstall_post_commit_hook(repo)


def test_uninstall_foreign_hook_untouched(repo):
    path = hook_file(repo)
    path.parent.mkdir(parents=True)
    path.write_text("#!/bin/sh\necho existing\n")
    with pytest.raises(HookError):
        uninstall_post_commit_hook(repo)
    assert path.read_text() == "#!/bin/sh\necho existing\n"


def test_strip_hook_section_of_script_leaves_shebang():
    assert strip_hook_section(POST_COMMIT_HOOK_SCRIPT) == "#!/bin/sh"


def test_strip_hook_section_resumes_at_next_shebang():
    content = "\n".join(["#!/bin/sh", HOOK_MARKER, "run thing", "#!/bin/bash", "echo after"])
    result = strip_hook_section(content)
    assert "run thing" not in result
    assert result.endswith("#!/bin/bash\necho after")


def test_strip_hook_section_without_marker_only_trims():
    assert strip_hook_section("  #!/bin/sh\necho hi\n\n") == "#!/bin/sh\necho hi"


def test_find_git_root_outside_repository(tmp_path):
    with pytest.raises(HookError, match="not a git repository"):
        find_git_root(tmp_path / "missing")