import pytest

from teamctx.schema import SchemaInfo, extract_prisma_schema
from teamctx.schema_multi import (
    extract_go_models,
    extract_java_models,
    extract_multi_lang_schema,
    extract_python_models,
    extract_typeorm_models,
)

GO_SOURCE = """package models

type User struct {
\tID    uint   `gorm:"primaryKey"`
\tName  string `db:"name"`
\tEmail string
}

type Plain struct {
\tValue int `json:"value"`
}
"""

SQLALCHEMY_SOURCE = """class User(Base):
    id = Column(Integer, primary_key=True)
    name = Column(String)

    extra = Column(Text)
"""

DJANGO_SOURCE = """class Post(models.Model):
    title = models.CharField(max_length=100)

    body = models.TextField()
class Next(models.Model):
    pass
"""

JAVA_SOURCE = """@Entity
@Table(name = "users")
public class User {
    private long serialVersionUID;
    private Long id;
    private String email;
}
"""

TYPEORM_SOURCE = """@Entity('users')
export class User {
  @PrimaryGeneratedColumn() id: number;
  @Column() name: string;
  @Column({ nullable: true }) bio?: string;
}
"""

PRISMA_SOURCE = """model Account {
  id    Int    @id @default(autoincrement())
  email String @unique
}
"""


def test_go_struct_with_tags_becomes_model():
    schema = SchemaInfo()
    extract_go_models(GO_SOURCE, "models.go", schema)
    assert [m.name for m in schema.models] == ["User"]
    model = schema.models[0]
    assert model.line == GO_SOURCE.split("\n").index("type User struct {") + 1
    assert [(f.name, f.type) for f in model.fields] == [("ID", "uint"), ("Name", "string")]
    assert model.fields[0].attributes == ["gorm:primaryKey"]
    assert model.fields[1].attributes == []
    assert model.file == "models.go"


def test_go_struct_without_db_tags_is_skipped():
    schema = SchemaInfo()
    extract_go_models('type Plain struct {\n\tValue int `json:"value"`\n}\n', "p.go", schema)
    assert schema.models == []


def test_sqlalchemy_model_stops_at_blank_line():
    schema = SchemaInfo()
    extract_python_models(SQLALCHEMY_SOURCE, "models.py", schema)
    assert [m.name for m in schema.models] == ["User"]
    assert [(f.name, f.type) for f in schema.models[0].fields] == [
        ("id", "Integer"),
        ("name", "String"),
    ]
    assert schema.models[0].line == 1


def test_django_model_skips_blank_lines_and_stops_at_class():
    schema = SchemaInfo()
    extract_python_models(DJANGO_SOURCE, "models.py", schema)
    assert [m.name for m in schema.models] == ["Post"]
    assert [(f.name, f.type) for f in schema.models[0].fields] == [
        ("title", "CharField"),
        ("body", "TextField"),
    ]


def test_java_entity_fields_and_table():
    schema = SchemaInfo()
    extract_java_models(JAVA_SOURCE, "User.java", schema)
    assert len(schema.models) == 1
    model = schema.models[0]
    assert model.name == "User"
    assert model.line == JAVA_SOURCE.split("\n").index("public class User {") + 1
    assert model.attributes == ["table:users"]
    assert [(f.name, f.type) for f in model.fields] == [("id", "Long"), ("email", "String")]


def test_java_without_entity_is_ignored():
    schema = SchemaInfo()
    extract_java_models(JAVA_SOURCE.replace("@Entity\n", ""), "User.java", schema)
    assert schema.models == []


def test_typeorm_entity_columns():
    schema = SchemaInfo()
    extract_typeorm_models(TYPEORM_SOURCE, "user.entity.ts", schema)
    assert len(schema.models) == 1
    model = schema.models[0]
    assert model.name == "User"
    assert model.line == 1
    assert model.attributes == ["table:users"]
    assert [(f.name, f.type) for f in model.fields] == [("name", "string"), ("bio", "string")]


def test_typeorm_entity_without_table_name():
    schema = SchemaInfo()
    extract_typeorm_models(TYPEORM_SOURCE.replace("@Entity('users')", "@Entity()"), "u.ts", schema)
    assert schema.models[0].attributes == []


def test_typeorm_entity_without_class_is_ignored():
    schema = SchemaInfo()
    extract_typeorm_models("@Entity('users')\n@Column() name: string;\n", "u.ts", schema)
    assert schema.models == []


def test_directory_walk_collects_all_languages(tmp_path):
    (tmp_path / "models.go").write_text(GO_SOURCE)
    (tmp_path / "models.py").write_text(SQLALCHEMY_SOURCE)
    (tmp_path / "user.entity.ts").write_text(TYPEORM_SOURCE)
    (tmp_path / "schema.prisma").write_text(PRISMA_SOURCE)
    skipped = tmp_path / "node_modules"
    skipped.mkdir()
    (skipped / "Hidden.java").write_text(JAVA_SOURCE.replace("User", "Hidden"))

    schema = extract_multi_lang_schema(str(tmp_path))
    names = sorted(m.name for m in schema.models)
    assert names == sorted(["User", "User", "User", "Account"])
    assert "Hidden" not in names


def test_single_prisma_file_matches_prisma_parser(tmp_path):
    path = tmp_path / "schema.prisma"
    path.write_text(PRISMA_SOURCE)
    assert extract_multi_lang_schema(str(path)).to_dict() == extract_prisma_schema(str(path)).to_dict()


def test_single_java_file(tmp_path):
    path = tmp_path / "User.java"
    path.write_text(JAVA_SOURCE)
    schema = extract_multi_lang_schema(str(path))
    assert [m.name for m in schema.models] == ["User"]
    assert schema.models[0].file == str(path)


def test_unknown_extension_gives_empty_schema(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text(JAVA_SOURCE)
    schema = extract_multi_lang_schema(str(path))
    assert schema.models == [] and schema.enums == []


def test_missing_path_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        extract_multi_lang_schema(str(tmp_path / "absent"))