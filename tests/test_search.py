"""Tests for the decklist search form."""

from deckshare.services.decklist import SearchCriteria
from deckshare.services.search import CORE_CATEGORY_LABEL

from conftest import CHARACTERS


def pack_states(form) -> dict[str, list[tuple[str, bool, bool]]]:
    return {
        category.label: [(p.label, p.checked, p.future) for p in category.packs]
        for category in form.categories
    }


class TestBuildSearchForm:
    """Test cases for the search form payload."""

    def test_blank_form(self, search_form_service):
        form = search_form_service.build_search_form()

        assert pack_states(form) == {
            CORE_CATEGORY_LABEL: [("Core Set", True, False)],
            "Westeros": [
                ("Taking the Black", True, False),
                ("Future Pack", False, True),
            ],
        }
        assert (form.on, form.off) == (2, 1)
        assert form.sort == "date"
        assert form.author == ""
        assert form.cards == []

    def test_promo_cycle_is_left_out(self, search_form_service):
        form = search_form_service.build_search_form()
        assert "Promotional" not in pack_states(form)

    def test_deluxe_joins_the_core_category(self, search_form_service, catalog):
        catalog.import_catalog(
            {
                "cycles": [
                    {
                        "code": "deluxe",
                        "name": "Wolves of the North",
                        "position": 3,
                        "packs": [
                            {
                                "code": "wotn",
                                "name": "Wolves of the North",
                                "position": 1,
                                "date_release": "2016-06-01",
                            }
                        ],
                    }
                ]
            }
        )

        form = search_form_service.build_search_form()

        assert [p.label for p in form.categories[0].packs] == [
            "Core Set",
            "Wolves of the North",
        ]
        assert "Wolves of the North" not in pack_states(form)

    def test_criteria_packs_are_checked(self, search_form_service, session_factory):
        form = search_form_service.build_search_form()
        future_pack = form.categories[1].packs[1]

        form = search_form_service.build_search_form(SearchCriteria(packs=[future_pack.id]))

        assert pack_states(form)["Westeros"] == [
            ("Taking the Black", False, False),
            ("Future Pack", True, True),
        ]
        assert (form.on, form.off) == (1, 2)

    def test_empty_criteria_packs_check_everything(self, search_form_service):
        form = search_form_service.build_search_form(SearchCriteria())

        assert (form.on, form.off) == (3, 0)

    def test_factions_and_tournaments(self, search_form_service):
        form = search_form_service.build_search_form()

        assert [f.name for f in form.factions] == ["House Lannister", "House Stark", "Neutral"]
        assert [t.name for t in form.active_tournaments] == ["Store Championship"]
        assert [t.name for t in form.inactive_tournaments] == ["Old Regional"]

    def test_criteria_are_echoed(self, search_form_service):
        criteria = SearchCriteria(
            author="alice",
            name="aggro",
            faction="stark",
            tournament_id=2,
            cards=[CHARACTERS[1], CHARACTERS[0], "nope"],
            sort="likes",
        )

        form = search_form_service.build_search_form(criteria)

        assert form.author == "alice"
        assert form.name == "aggro"
        assert form.faction_selected == "stark"
        assert form.selected_tournament == 2
        assert form.sort == "likes"
        assert [card.code for card in form.cards] == [CHARACTERS[0], CHARACTERS[1]]
