"""Shared migration and diagram sources for the test suite."""

import pytest

from schemabridge.config.settings import TranslationConfig

MIGRATION_HEADER = """<?php

use Illuminate\\Database\\Migrations\\Migration;
use Illuminate\\Database\\Schema\\Blueprint;
use Illuminate\\Support\\Facades\\Schema;

return new class extends Migration
{
    public function up(): void
    {
"""

MIGRATION_FOOTER = """
    }

    public function down(): void
    {
        Schema::dropIfExists('%s');
    }
};
"""


def migration(table: str, body: str) -> str:
    """Wrap builder statements in a complete migration file."""
    block = f"        Schema::create('{table}', function (Blueprint $table) {{\n{body}\n        }});"
    return MIGRATION_HEADER + block + MIGRATION_FOOTER % table


USERS = migration(
    "users",
    """
            $table->id();
            $table->string('name');
            $table->string('email', 150)->unique()->comment('Login e-mail');
            $table->timestamp('email_verified_at')->nullable();
            $table->rememberToken();
            $table->timestamps();
""",
)

POSTS = migration(
    "posts",
    """
            $table->id();
            $table->unsignedBigInteger('user_id');
            $table->string('title', 200);
            $table->decimal('price', 8, 2)->nullable();
            $table->enum('status', ['draft', 'published'])->default('draft');
            $table->timestamps();
            $table->softDeletes();

            $table->foreign('user_id')->references('id')->on('users')->onDelete('cascade');
""",
)

PROFILES = migration(
    "profiles",
    """
            $table->id();
            $table->foreignId('user_id')->constrained();
            $table->string('bio')->nullable();
            $table->timestamps();
            $table->unique('user_id');
""",
)

ROLES = migration(
    "roles",
    """
            $table->id();
            $table->string('name');
            $table->timestamps();
""",
)

ROLE_USER = migration(
    "role_user",
    """
            $table->id();
            $table->foreignId('role_id')->constrained()->onDelete('cascade');
            $table->foreignId('user_id')->constrained()->onDelete('cascade');
            $table->timestamps();
""",
)

BLOG_DIAGRAM = """@startuml
' Blog schema

entity User {
  * id : bigint
  name : varchar(100) NOT NULL
  email : varchar(150) NOT NULL "Login e-mail"
}

entity Post {
  * id : bigint
  title : varchar(200) NOT NULL
  price : decimal(8,2)
  status : enum(draft,published) NOT NULL
  deleted_at : timestamp
}

entity Tag {
  * id : bigint
  label : varchar(50) NOT NULL
}

' Relationships
User ||--o{ Post
Post }o--o{ Tag
@enduml
"""


@pytest.fixture
def config():
    return TranslationConfig()


@pytest.fixture
def blog_migrations():
    """Migration files in execution order, pivot declared before one of its parents."""
    return [USERS, POSTS, PROFILES, ROLE_USER, ROLES]
