# backend/client.py
import requests

API = "http://localhost:8000/api/v1"  # adjust if running on docker-compose

def test_health():
    r = requests.get(f"{API}/health")
    print("Health:", r.status_code, r.json())

def test_suggestions():
    r = requests.get(f"{API}/query/suggestions")
    print("Suggestions:", r.status_code, r.json())

def test_run_sql():
    q = {"query": "SELECT category, COUNT(*) AS count FROM legalprompt GROUP BY category"}
    r = requests.post(f"{API}/query/run", json=q)
    print("Run SQL:", r.status_code, r.json())

def test_rejects_write():
    r = requests.post(f"{API}/query/run", json={"query": "DELETE FROM legalprompt"})
    print("Rejected write:", r.status_code, r.json())

def test_create_prompt():
    payload = {
        "name": "NDA review",
        "prompt": "Review this NDA and list unusual clauses.",
        "category": "Contracts",
    }
    r = requests.post(f"{API}/prompts", json=payload)
    print("Create prompt:", r.status_code, r.json())

def test_list_prompts():
    r = requests.get(f"{API}/prompts", params={"page": 1, "limit": 5})
    print("List prompts:", r.status_code, r.json())

def test_query():
    q = {"question": "Show the count of legal prompts by category"}
    r = requests.post(f"{API}/query", json=q, timeout=120)
    print("Query:", r.status_code, r.json())

if __name__ == "__main__":
    print("--- Testing FastAPI backend ---")
    test_health()
    test_suggestions()
    test_run_sql()
    test_rejects_write()
    test_create_prompt()
    test_list_prompts()
    test_query()
