"""Shared pytest fixtures for scaffold-installer tests."""

import io
import json

import pytest

from scaffold_installer import Installer


EXCEPTION_PHP = "<?php\n\n// @NAME@\nclass Exception extends \\Exception\n{\n}\n"
CRITICAL_PHP = "<?php\n\nclass CriticalException extends Exception\n{\n}\n"


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Create a consumer project with one vendor app and chdir into it.

    Layout:
    - composer.json (maps Vendor\\App\\ to vendor/app/src/)
    - installation.php (not JSON)
    - vendor/app/README.md
    - vendor/app/src/Exception.php
    - vendor/app/src/CriticalException.php
    - vendor/app/src/sub/Helper.php
    - vendor/app/src/sub/deep/Thing.php
    """
    src = tmp_path / 'vendor' / 'app' / 'src'
    (src / 'sub' / 'deep').mkdir(parents=True)
    (tmp_path / 'vendor' / 'app' / 'README.md').write_text('# App\n')
    (src / 'Exception.php').write_text(EXCEPTION_PHP)
    (src / 'CriticalException.php').write_text(CRITICAL_PHP)
    (src / 'sub' / 'Helper.php').write_text('<?php // helper\n')
    (src / 'sub' / 'deep' / 'Thing.php').write_text('<?php // thing\n')

    (tmp_path / 'composer.json').write_text(json.dumps({
        'name': 'vendor/app',
        'version': 'v1.1.0',
        'autoload': {'psr-4': {'Vendor\\App\\': 'vendor/app/src/'}},
    }))
    (tmp_path / 'installation.php').write_text('<?php\n\n$ins = new Installer();\n')

    monkeypatch.chdir(tmp_path)
    return tmp_path


class ScriptedReader:
    """Stands in for input(): returns canned answers and records prompts."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        return self.answers.pop(0)


@pytest.fixture
def reader():
    return ScriptedReader


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def installer(project, stream):
    """Installer with composer loaded, echoing into an in-memory stream."""
    ins = Installer(stream=stream)
    ins.set_composer('composer.json')
    return ins


def fail_text(operation, cause):
    return f' => {operation} ... failed, cause {cause} !\n'
