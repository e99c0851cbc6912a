import click

from veriton_backend.model.kinds import EntityKind
from veriton_backend.permissions.core import build_scope_predicate
from veriton_backend.permissions.predicates import describe
from veriton_backend.permissions.principal import Principal, Role

ROLE_CHOICES = [role.value for role in Role] + ["none"]
KIND_CHOICES = [kind.value for kind in EntityKind] + ["all"]


@click.command()
@click.option("--role", "role", type=click.Choice(ROLE_CHOICES, case_sensitive=False), default="none")
@click.option("--school-id", "school_id", default=None)
@click.option("--teacher-id", "teacher_id", default=None)
@click.option("--student-id", "student_id", default=None)
@click.option("--grade-id", "grade_id", default=None)
@click.option("--kind", "kind", type=click.Choice(KIND_CHOICES, case_sensitive=False), default="all")
@click.option("--anonymous", is_flag=True, help="Explain for an unauthenticated request")
def explain_scope(role, school_id, teacher_id, student_id, grade_id, kind, anonymous):
    """Print the row predicate a principal gets for each entity kind"""

    if anonymous:
        principal = Principal.anonymous()
    else:
        principal = Principal(
            is_authenticated=True,
            role=None if role.lower() == "none" else next(r for r in Role if r.value.lower() == role.lower()),
            school_id=school_id,
            teacher_id=teacher_id,
            student_id=student_id,
            grade_id=grade_id,
        )

    kinds = list(EntityKind) if kind.lower() == "all" else [EntityKind(kind.lower())]
    for entity_kind in kinds:
        click.echo(f"{entity_kind.value}: {describe(build_scope_predicate(principal, entity_kind))}")
