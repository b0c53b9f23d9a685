"""Shared fixtures: a small Laravel-style repository and a temporary store."""

from __future__ import annotations

from pathlib import Path

import pytest

from repoindex.config import IndexSettings
from repoindex.store import RecordStore

USER_MODEL = """<?php

namespace App\\Models;

class User extends Model
{
    protected $fillable = ['name', 'email'];

    public function posts()
    {
        return $this->hasMany(Post::class);
    }
}
"""

CREATE_USERS = """<?php

return new class extends Migration
{
    public function up(): void
    {
        Schema::create('users', function (Blueprint $table) {
            $table->id();
        });
        Schema::table('users', function (Blueprint $table) {
            $table->string('nickname');
        });
    }
};
"""

WEB_ROUTES = """<?php

Route::resource('posts', PostController::class);
Route::get('/home', [HomeController::class, 'index']);
"""

APP_CONFIG = """<?php

return [
    'name' => env('APP_NAME', 'Laravel'),
    'debug' => false,
];
"""


@pytest.fixture()
def repo(tmp_path: Path) -> Path:
    """Create a minimal Laravel-style repository."""
    root = tmp_path / "repo"
    (root / "app" / "Models").mkdir(parents=True)
    (root / "app" / "Http").mkdir()
    (root / "database" / "migrations").mkdir(parents=True)
    (root / "routes").mkdir()
    (root / "config").mkdir()
    (root / "resources" / "views").mkdir(parents=True)
    (root / "vendor" / "laravel").mkdir(parents=True)

    (root / "app" / "Models" / "User.php").write_text(USER_MODEL)
    (root / "app" / "Http" / "Kernel.php").write_text(
        "<?php\nclass Kernel\n{\n    function handle() {}\n}\n"
    )
    (root / "database" / "migrations" / "2024_01_01_000000_create_users_table.php").write_text(
        CREATE_USERS
    )
    (root / "routes" / "web.php").write_text(WEB_ROUTES)
    (root / "config" / "app.php").write_text(APP_CONFIG)
    (root / "resources" / "views" / "welcome.blade.php").write_text("<h1>{{ $title }}</h1>\n")
    (root / "vendor" / "laravel" / "Framework.php").write_text("<?php class Framework {}")
    (root / "composer.json").write_text('{"name": "acme/app"}')
    return root


@pytest.fixture()
def settings(repo: Path) -> IndexSettings:
    return IndexSettings(root=repo)


@pytest.fixture()
def store(tmp_path: Path) -> RecordStore:
    """An empty record store in a temp LanceDB directory."""
    return RecordStore(index_dir=tmp_path / "lancedb")
