"""Tests for campaign and mention endpoints."""

import pytest

CAMPAIGN = {
    "name": "Spring Launch",
    "description": "Product launch monitoring",
    "start_date": "2026-03-01T00:00:00Z",
    "end_date": "2026-04-01T00:00:00Z",
    "budget": 25000.0,
}


async def create_campaign(client, **overrides):
    response = await client.post("/campaigns", json={**CAMPAIGN, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


class TestCampaigns:
    @pytest.mark.asyncio
    async def test_create(self, client):
        campaign = await create_campaign(client)

        assert campaign["id"] > 0
        assert campaign["name"] == "Spring Launch"
        assert campaign["status"] == "active"
        assert campaign["budget"] == 25000.0
        assert "created_at" in campaign

    @pytest.mark.asyncio
    async def test_create_requires_name(self, client):
        response = await client.post("/campaigns", json={**CAMPAIGN, "name": ""})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_end_before_start_is_rejected(self, client):
        response = await client.post(
            "/campaigns", json={**CAMPAIGN, "end_date": "2026-02-01T00:00:00Z"}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_negative_budget_is_rejected(self, client):
        response = await client.post("/campaigns", json={**CAMPAIGN, "budget": -1})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get(self, client):
        created = await create_campaign(client)

        response = await client.get(f"/campaigns/{created['id']}")

        assert response.status_code == 200
        assert response.json()["name"] == "Spring Launch"

    @pytest.mark.asyncio
    async def test_get_unknown_is_404(self, client):
        response = await client.get("/campaigns/999")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_list_with_status_filter_and_paging(self, client):
        first = await create_campaign(client, name="First")
        await create_campaign(client, name="Second")
        await client.put(f"/campaigns/{first['id']}", json={"status": "paused"})

        active = (await client.get("/campaigns", params={"status": "active"})).json()
        assert [c["name"] for c in active["campaigns"]] == ["Second"]

        page = (await client.get("/campaigns", params={"limit": 1})).json()
        assert len(page["campaigns"]) == 1

        all_campaigns = (await client.get("/campaigns")).json()["campaigns"]
        assert {c["name"] for c in all_campaigns} == {"First", "Second"}

    @pytest.mark.asyncio
    async def test_partial_update(self, client):
        created = await create_campaign(client)

        response = await client.put(
            f"/campaigns/{created['id']}", json={"budget": 30000, "status": "paused"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["budget"] == 30000
        assert body["status"] == "paused"
        assert body["name"] == "Spring Launch"

    @pytest.mark.asyncio
    async def test_empty_update_is_400(self, client):
        created = await create_campaign(client)

        response = await client.put(f"/campaigns/{created['id']}", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    @pytest.mark.asyncio
    async def test_update_unknown_is_404(self, client):
        response = await client.put("/campaigns/999", json={"name": "Ghost"})
        assert response.status_code == 404


class TestMentions:
    @pytest.mark.asyncio
    async def test_create_and_list(self, client):
        campaign = await create_campaign(client)
        for hour, platform in ((9, "twitter"), (11, "reddit"), (10, "twitter")):
            response = await client.post("/mentions", json={
                "campaign_id": campaign["id"],
                "platform": platform,
                "content": f"Mention at {hour}",
                "sentiment": 0.2,
                "reach": 100,
                "mentioned_at": f"2026-03-02T{hour:02d}:00:00Z",
            })
            assert response.status_code == 201

        mentions = (await client.get("/mentions", params={"campaign_id": campaign["id"]})).json()
        assert [m["content"] for m in mentions["mentions"]] == [
            "Mention at 11", "Mention at 10", "Mention at 9",
        ]

        twitter = (await client.get("/mentions", params={"platform": "twitter"})).json()
        assert len(twitter["mentions"]) == 2

    @pytest.mark.asyncio
    async def test_unknown_campaign_is_404(self, client):
        response = await client.post("/mentions", json={
            "campaign_id": 42,
            "platform": "twitter",
            "content": "Orphan",
            "mentioned_at": "2026-03-02T09:00:00Z",
        })
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_sentiment_out_of_range(self, client):
        campaign = await create_campaign(client)
        response = await client.post("/mentions", json={
            "campaign_id": campaign["id"],
            "platform": "twitter",
            "content": "Too happy",
            "sentiment": 1.5,
            "mentioned_at": "2026-03-02T09:00:00Z",
        })
        assert response.status_code == 422
