"""
Tests for ImportManager.ensure_import.
"""

from authme.mutation import ImportManager, SourceModel, load_source_model


def model_of(tmp_path, source: str) -> SourceModel:
    path = tmp_path / "main.ts"
    path.write_text(source)
    return load_source_model(path)


class TestEnsureImport:

    def test_appends_new_declaration_after_last_import(self, tmp_path):
        model = model_of(tmp_path, "import { NestFactory } from '@nestjs/core';\n\nbootstrap();\n")

        added = ImportManager().ensure_import(model, "@nestjs/config", ["ConfigModule"])

        assert added == ["ConfigModule"]
        assert model.print() == (
            "import { NestFactory } from '@nestjs/core';\n"
            "import { ConfigModule } from '@nestjs/config';\n"
            "\nbootstrap();\n"
        )

    def test_trailing_comment_stays_on_its_import(self, tmp_path):
        model = model_of(tmp_path, "import { NestFactory } from '@nestjs/core'; // framework\nbootstrap();\n")

        ImportManager().ensure_import(model, "@nestjs/config", ["ConfigModule"])

        assert model.print() == (
            "import { NestFactory } from '@nestjs/core'; // framework\n"
            "import { ConfigModule } from '@nestjs/config';\n"
            "bootstrap();\n"
        )
        model.check_syntax()

    def test_extends_existing_named_import(self, tmp_path):
        model = model_of(tmp_path, "import { NestFactory } from '@nestjs/core';\n")

        added = ImportManager().ensure_import(model, "@nestjs/core", ["NestFactory", "Reflector"])

        assert added == ["Reflector"]
        assert model.print() == "import { NestFactory, Reflector } from '@nestjs/core';\n"

    def test_second_call_is_a_noop(self, tmp_path):
        model = model_of(tmp_path, "import { NestFactory } from '@nestjs/core';\n")
        manager = ImportManager()

        manager.ensure_import(model, "@nestjs/common", ["ValidationPipe"])
        once = model.print()
        added = manager.ensure_import(model, "@nestjs/common", ["ValidationPipe"])

        assert added == []
        assert model.print() == once
        assert once.count("ValidationPipe") == 1

    def test_aliased_name_counts_as_present(self, tmp_path):
        model = model_of(tmp_path, "import { Reflector as R } from '@nestjs/core';\n")

        assert ImportManager().ensure_import(model, "@nestjs/core", ["Reflector"]) == []
        assert not model.modified

    def test_default_import_gains_named_bindings(self, tmp_path):
        model = model_of(tmp_path, "import express from 'express';\n")

        ImportManager().ensure_import(model, "express", ["Router"])

        assert model.print() == "import express, { Router } from 'express';\n"

    def test_namespace_import_is_not_extended(self, tmp_path):
        model = model_of(tmp_path, "import * as bcrypt from 'bcrypt';\n")

        ImportManager().ensure_import(model, "bcrypt", ["hash"])

        assert model.print() == "import * as bcrypt from 'bcrypt';\nimport { hash } from 'bcrypt';\n"

    def test_type_only_import_is_not_extended(self, tmp_path):
        model = model_of(tmp_path, "import type { User } from './user';\n")

        ImportManager().ensure_import(model, "./user", ["User"])

        assert model.print() == "import type { User } from './user';\nimport { User } from './user';\n"

    def test_side_effect_import_is_not_extended(self, tmp_path):
        model = model_of(tmp_path, "import 'reflect-metadata';\n")

        ImportManager().ensure_import(model, "reflect-metadata", ["x"])

        assert model.print() == "import 'reflect-metadata';\nimport { x } from 'reflect-metadata';\n"

    def test_file_without_imports(self, tmp_path):
        model = model_of(tmp_path, "bootstrap();\n")

        ImportManager().ensure_import(model, "./auth/guards/jwt-auth.guard", ["JwtAuthGuard"])

        assert model.print() == "import { JwtAuthGuard } from './auth/guards/jwt-auth.guard';\nbootstrap();\n"

    def test_follows_double_quote_style(self, tmp_path):
        model = model_of(tmp_path, 'import { NestFactory } from "@nestjs/core";\n')

        ImportManager().ensure_import(model, "@nestjs/config", ["ConfigModule"])

        assert 'import { ConfigModule } from "@nestjs/config";' in model.print()

    def test_duplicate_requested_names_added_once(self, tmp_path):
        model = model_of(tmp_path, "")

        added = ImportManager().ensure_import(model, "@nestjs/swagger", ["SwaggerModule", "SwaggerModule"])

        assert added == ["SwaggerModule"]
        assert model.print() == "import { SwaggerModule } from '@nestjs/swagger';\n"

    def test_result_still_parses(self, tmp_path):
        model = model_of(tmp_path, "import { A } from './a';\nimport B from './b';\n")
        manager = ImportManager()

        manager.ensure_import(model, "./a", ["C", "D"])
        manager.ensure_import(model, "./b", ["E"])
        manager.ensure_import(model, "./f", ["F"])

        model.check_syntax()
        assert manager.named_imports(model, model.imports()[0]) == ["A", "C", "D"]
        assert manager.named_imports(model, model.imports()[1]) == ["E"]
        assert len(model.imports()) == 3
