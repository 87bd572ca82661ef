import pytest
from datetime import date

from perfeval.core.exceptions import FormValidationError, NotFoundError
from perfeval.schemas.evaluation import ActionPlanSubmission, BehaviorSlot, CompetencySection, PlanRow
from perfeval.schemas.records import EvaluationStatus, EvaluationType

def _initial(manager, employee, level, fill_form, scores, on=date(2024, 1, 15)):
    form = manager.forms.new_form(employee.id, level.id)
    form.evaluation_date = on
    return fill_form(form, scores, comment="ok")

def test_create_initial_sets_derived_fields(manager, evaluator, juan, ope_level, fill_form):
    form = _initial(manager, juan, ope_level, fill_form, [[80, 90], [60, None]])
    result = manager.save(form, "save", evaluator)

    stored = manager.repo.get_evaluation(result.id)
    assert stored.status == EvaluationStatus.DRAFT
    assert stored.next_evaluation_date == date(2024, 7, 15)
    assert stored.total == 72.50
    assert stored.evaluator_name == evaluator.employee.email
    assert len(manager.repo.list_details(result.id)) == 3
    assert manager.repo.list_plan_items(result.id) == []

def test_finalize_action(manager, evaluator, juan, ope_level, fill_form):
    form = _initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]])
    result = manager.save(form, "finalize", evaluator)
    assert result.status == EvaluationStatus.FINALIZED

def test_next_date_clamps_to_month_end(manager, evaluator, juan, ope_level, fill_form):
    form = _initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]], on=date(2023, 8, 31))
    result = manager.save(form, "save", evaluator)
    assert result.next_evaluation_date == date(2024, 2, 29)

def test_persisted_total_matches_report(manager, evaluator, juan, ope_level, fill_form):
    form = _initial(manager, juan, ope_level, fill_form, [[77, 91], [64, None]])
    result = manager.save(form, "save", evaluator)
    report = manager.build_report(result.id)
    assert result.total == report.overall_average
    assert manager.repo.get_evaluation(result.id).total == report.overall_average

def test_follow_up_has_no_next_date(manager, evaluator, juan, ope_level, fill_form):
    origin = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]]), "save", evaluator)

    target = manager.resolve_for_follow_up(origin.id)
    assert (target.employee_id, target.level_id, target.origin_evaluation_id) == (juan.id, ope_level.id, origin.id)

    follow_up = manager.forms.new_form(target.employee_id, target.level_id, target.origin_evaluation_id)
    fill_form(follow_up, [[85, 95], [80, 80]])
    result = manager.save(follow_up, "finalize", evaluator)

    stored = manager.repo.get_evaluation(result.id)
    assert stored.evaluation_type == EvaluationType.FOLLOW_UP
    assert stored.origin_evaluation_id == origin.id
    assert stored.next_evaluation_date is None

def test_follow_up_without_origin_is_rejected(manager, evaluator, juan, ope_level, fill_form):
    form = _initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]])
    form.evaluation_type = EvaluationType.FOLLOW_UP

    with pytest.raises(FormValidationError) as exc_info:
        manager.save(form, "save", evaluator)

    assert exc_info.value.form is form
    assert manager.repo.list_evaluations_by_employee(juan.id) == []

def test_initial_with_origin_is_rejected(manager, evaluator, juan, ope_level, fill_form):
    form = _initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]])
    form.origin_evaluation_id = "something"
    with pytest.raises(FormValidationError):
        manager.save(form, "save", evaluator)

def test_unknown_origin_is_not_found(manager, evaluator, juan, ope_level, fill_form):
    form = manager.forms.new_form(juan.id, ope_level.id, origin_evaluation_id="nope")
    fill_form(form, [[80, 90], [70, 70]])
    with pytest.raises(NotFoundError):
        manager.save(form, "save", evaluator)

def test_behavior_from_another_level_is_rejected(manager, evaluator, juan, ope_level, fill_form, seed):
    form = _initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]])
    foreign = next(b for b in seed.behaviors if b.level_id != ope_level.id)
    form.competencies.append(CompetencySection(
        name="Extra",
        behaviors=[BehaviorSlot(behavior_id=foreign.id, score=50)],
    ))

    with pytest.raises(FormValidationError):
        manager.save(form, "save", evaluator)
    assert manager.repo.list_evaluations_by_employee(juan.id) == []

def test_update_unknown_evaluation(manager, evaluator, juan, ope_level, fill_form):
    form = _initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]])
    form.id = "missing"
    with pytest.raises(NotFoundError):
        manager.save(form, "save", evaluator)

def test_edit_round_trip_reproduces_details(manager, evaluator, juan, ope_level, fill_form):
    created = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [60, None]]), "save", evaluator)
    before = {(d.behavior_id, d.score, d.comment) for d in manager.repo.list_details(created.id)}

    form = manager.forms.edit_form(created.id)
    assert form.id == created.id
    assert form.evaluation_date == date(2024, 1, 15)
    manager.save(form, "save", evaluator)

    after = {(d.behavior_id, d.score, d.comment) for d in manager.repo.list_details(created.id)}
    assert after == before

def test_update_replaces_details_wholesale(manager, evaluator, juan, ope_level, fill_form):
    created = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 60]]), "save", evaluator)
    assert len(manager.repo.list_details(created.id)) == 4

    form = manager.forms.edit_form(created.id)
    fill_form(form, [[85, None], [None, 65]])
    result = manager.save(form, "finalize", evaluator)

    details = manager.repo.list_details(created.id)
    assert sorted(d.score for d in details) == [65, 85]
    assert result.status == EvaluationStatus.FINALIZED

def test_update_keeps_existing_action_plan(manager, evaluator, juan, ope_level, fill_form):
    created = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 60]]), "save", evaluator)
    manager.save_action_plan(created.id, ActionPlanSubmission(rows=[
        PlanRow(behavior_label="Follows up", description="Weekly check-in"),
    ]))

    form = manager.forms.edit_form(created.id)
    manager.save(form, "save", evaluator)

    plan = manager.repo.list_plan_items(created.id)
    assert [p.description for p in plan] == ["Weekly check-in"]

def test_start_evaluation_auto_assigns_level(manager, juan, ope_level):
    selection = manager.start_evaluation(juan.id)
    assert selection.auto_assigned is True
    assert selection.form.level_id == ope_level.id

def test_start_evaluation_offers_levels_without_form_type(manager, maria):
    selection = manager.start_evaluation(maria.id)
    assert selection.auto_assigned is False
    assert selection.form is None
    assert {lvl.code for lvl in selection.levels} == {"ESTR", "TACT", "OPEADM", "OPE"}

def test_start_evaluation_unknown_employee(manager):
    with pytest.raises(NotFoundError):
        manager.start_evaluation("missing")

def test_list_for_evaluator_newest_first(manager, evaluator, juan, maria, ope_level, fill_form):
    older = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 60]], on=date(2024, 1, 10)), "save", evaluator)
    newer = manager.save(_initial(manager, maria, ope_level, fill_form, [[80, 90], [70, 60]], on=date(2024, 3, 1)), "save", evaluator)

    items = manager.list_for_evaluator(evaluator.key.upper())
    assert [i.id for i in items] == [newer.id, older.id]
    assert items[0].employee_name == "María López"
    assert items[0].level_code == "OPE"
    assert all(i.can_follow_up for i in items)

def test_follow_up_rows_cannot_be_followed_up(manager, evaluator, juan, ope_level, fill_form):
    origin = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]]), "save", evaluator)
    follow_up = fill_form(manager.forms.new_form(juan.id, ope_level.id, origin.id), [[85, 95], [80, 80]])
    manager.save(follow_up, "save", evaluator)

    flags = {i.evaluation_type: i.can_follow_up for i in manager.list_for_evaluator(evaluator.key)}
    assert flags == {EvaluationType.INITIAL: True, EvaluationType.FOLLOW_UP: False}

def test_employee_folder(manager, evaluator, juan, ope_level, fill_form):
    manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 60]]), "save", evaluator)
    folder = manager.employee_folder(juan.id)
    assert folder.employee_name == "Juan Pérez"
    assert len(folder.evaluations) == 1
    assert folder.evaluations[0].total == 75.00

def test_employee_folder_unknown_employee(manager):
    with pytest.raises(NotFoundError):
        manager.employee_folder("missing")

def test_evaluation_cannot_be_its_own_origin(manager, evaluator, juan, ope_level, fill_form):
    created = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]]), "save", evaluator)

    form = manager.forms.edit_form(created.id)
    form.evaluation_type = EvaluationType.FOLLOW_UP
    form.origin_evaluation_id = created.id

    with pytest.raises(FormValidationError) as exc_info:
        manager.save(form, "save", evaluator)
    assert exc_info.value.details == {"field": "origin_evaluation_id"}
    stored = manager.repo.get_evaluation(created.id)
    assert stored.evaluation_type == EvaluationType.INITIAL
    assert stored.origin_evaluation_id is None

def test_origin_chain_cannot_loop_back(manager, evaluator, juan, ope_level, fill_form):
    first = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]]), "save", evaluator)
    second = manager.save(
        fill_form(manager.forms.new_form(juan.id, ope_level.id, first.id), [[85, 95], [80, 80]]),
        "save",
        evaluator,
    )
    third = manager.save(
        fill_form(manager.forms.new_form(juan.id, ope_level.id, second.id), [[90, 95], [85, 85]]),
        "save",
        evaluator,
    )

    for origin in (second.id, third.id):
        form = manager.forms.edit_form(first.id)
        form.evaluation_type = EvaluationType.FOLLOW_UP
        form.origin_evaluation_id = origin
        with pytest.raises(FormValidationError):
            manager.save(form, "save", evaluator)

    assert manager.repo.get_evaluation(first.id).origin_evaluation_id is None

def test_editing_a_follow_up_keeps_its_chain(manager, evaluator, juan, ope_level, fill_form):
    first = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]]), "save", evaluator)
    second = manager.save(
        fill_form(manager.forms.new_form(juan.id, ope_level.id, first.id), [[85, 95], [80, 80]]),
        "save",
        evaluator,
    )

    form = manager.forms.edit_form(second.id)
    fill_form(form, [[88, 95], [80, 80]])
    result = manager.save(form, "finalize", evaluator)

    assert result.status == EvaluationStatus.FINALIZED
    assert manager.repo.get_evaluation(second.id).origin_evaluation_id == first.id

def test_repeated_behavior_is_rejected(manager, evaluator, juan, ope_level, fill_form):
    form = _initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]])
    repeated = form.competencies[0].behaviors[0].behavior_id
    form.competencies[1].behaviors.append(BehaviorSlot(behavior_id=repeated, score=10))

    with pytest.raises(FormValidationError) as exc_info:
        manager.save(form, "save", evaluator)
    assert exc_info.value.details == {"field": "competencies"}
    assert manager.repo.list_evaluations_by_employee(juan.id) == []

def test_repeated_behavior_on_update_leaves_stored_details(manager, evaluator, juan, ope_level, fill_form):
    created = manager.save(_initial(manager, juan, ope_level, fill_form, [[80, 90], [70, 70]]), "save", evaluator)
    before = {(d.behavior_id, d.score) for d in manager.repo.list_details(created.id)}

    form = manager.forms.edit_form(created.id)
    form.competencies[0].behaviors.append(form.competencies[0].behaviors[0].model_copy(update={"score": 10}))
    with pytest.raises(FormValidationError):
        manager.save(form, "save", evaluator)

    assert {(d.behavior_id, d.score) for d in manager.repo.list_details(created.id)} == before
