"""
Tests for project schemas: plan parsing, chat messages and step markup.
"""
import json

import pytest

from core.exceptions import MalformedResponseError
from schemas.projects import ChatMessage, ProjectPlan, SurpriseAnalysis, parse_step


class TestProjectPlanParsing:
    @pytest.mark.unit
    def test_well_formed_response_populates_all_fields(self, sample_plan_json):
        plan = ProjectPlan.from_response_text(sample_plan_json)

        assert plan.style_summary.startswith("A warm, grounded aesthetic")
        assert len(plan.steps) == 3
        assert plan.cost_estimate == "$50 - $100"
        assert plan.time_estimate == "3-4 hours"
        assert plan.materials == ["120-grit sandpaper", "Wood stain"]
        assert plan.tools == ["Screwdriver", "Orbital sander"]
        assert plan.safety == ["Wear a dust mask while sanding."]
        assert plan.item_description == "A six-drawer pine dresser with tapered legs."

    @pytest.mark.unit
    def test_missing_required_field_is_rejected(self, sample_plan_data):
        del sample_plan_data["safety"]

        with pytest.raises(MalformedResponseError):
            ProjectPlan.from_response_text(json.dumps(sample_plan_data))

    @pytest.mark.unit
    def test_wrong_type_is_rejected(self, sample_plan_data):
        sample_plan_data["steps"] = "Sand it"

        with pytest.raises(MalformedResponseError):
            ProjectPlan.from_response_text(json.dumps(sample_plan_data))

    @pytest.mark.unit
    def test_invalid_json_is_a_value_error(self):
        with pytest.raises(ValueError):
            ProjectPlan.from_response_text("```json {not json")

    @pytest.mark.unit
    def test_plan_is_immutable(self, sample_plan_json):
        plan = ProjectPlan.from_response_text(sample_plan_json)

        with pytest.raises(Exception):
            plan.cost_estimate = "$0"

    @pytest.mark.unit
    def test_serializes_with_wire_names(self, sample_plan_data):
        plan = ProjectPlan.model_validate(sample_plan_data)
        assert plan.model_dump(by_alias=True) == sample_plan_data


class TestSurpriseAnalysisParsing:
    @pytest.mark.unit
    def test_parses_styles(self):
        analysis = SurpriseAnalysis.from_response_text(
            json.dumps({"itemDescription": "oak chair", "styles": ["A", "B", "C", "D", "E"]})
        )
        assert analysis.item_description == "oak chair"
        assert analysis.styles == ["A", "B", "C", "D", "E"]

    @pytest.mark.unit
    def test_missing_styles_is_rejected(self):
        with pytest.raises(MalformedResponseError):
            SurpriseAnalysis.from_response_text(json.dumps({"itemDescription": "oak chair"}))


class TestChatMessage:
    @pytest.mark.unit
    def test_model_role_is_assistant(self):
        assert ChatMessage(role="model", text="Hi!").role == "assistant"

    @pytest.mark.unit
    def test_unknown_role_is_rejected(self):
        with pytest.raises(ValueError):
            ChatMessage(role="system", text="...")


class TestParseStep:
    @pytest.mark.unit
    def test_extracts_prefix_style_callouts(self):
        step = parse_step(
            "Cut the top with a **TOOL:** Miter Saw (e.g., DeWalt DWS780 12-inch), then fasten with "
            "**MATERIAL:** deck screws (e.g., GRK R4 Multi-Purpose Screws)."
        )

        assert [(r.type, r.name) for r in step.resources] == [
            ("TOOL", "Miter Saw (e.g., DeWalt DWS780 12-inch)"),
            ("MATERIAL", "deck screws (e.g., GRK R4 Multi-Purpose Screws)"),
        ]
        assert step.image_descriptions == []
        assert not step.image_only

    @pytest.mark.unit
    def test_extracts_fully_bolded_callouts(self):
        step = parse_step("Apply **MATERIAL: Behr Premium Plus Ultra Pure White** with a brush.")

        assert [(r.type, r.name) for r in step.resources] == [("MATERIAL", "Behr Premium Plus Ultra Pure White")]

    @pytest.mark.unit
    def test_strips_leading_ordinals_and_bullets(self):
        assert parse_step("1. Remove the drawers.").text == "Remove the drawers."
        assert parse_step("Step 2: Sand the top.").text == "Sand the top."
        assert parse_step("- Wipe down.").text == "Wipe down."
        assert parse_step("* Wipe down.").text == "Wipe down."

    @pytest.mark.unit
    def test_keeps_leading_bold_callout(self):
        step = parse_step("**TOOL:** Orbital Sander (e.g., Bosch ROS20VSC) smooths the top.")

        assert step.text.startswith("**TOOL:**")
        assert step.resources[0].name == "Orbital Sander (e.g., Bosch ROS20VSC)"

    @pytest.mark.unit
    def test_image_placeholders(self):
        step = parse_step("Sand the edges. [Image of: sanding block on a table edge] Then wipe clean.")

        assert step.image_descriptions == ["sanding block on a table edge"]
        assert not step.image_only

    @pytest.mark.unit
    def test_image_only_step(self):
        step = parse_step("[Image of: finished dresser in sage green]")

        assert step.image_only
        assert step.image_descriptions == ["finished dresser in sage green"]
