import requests, sys, json
API  = sys.argv[1] if len(sys.argv) > 1 else "http://127.0.0.1:8000"
ES   = "http://127.0.0.1:9200"
JSON = {"content-type": "application/json"}

def ok(resp):
    print(resp.status_code, resp.request.method, resp.url)
    if resp.content:
        print(json.dumps(resp.json(), indent=2))

print("ES:")
ok(requests.get(ES))

print("\nAPI /health:")
ok(requests.get(f"{API}/health"))

print("\nAPI POST /items:")
ok(requests.post(f"{API}/items", headers=JSON, json=[{"_index": "smoke", "code": "SMOKE"}]))

print("\nAPI GET /items/smoke:")
resp = requests.get(f"{API}/items/smoke", params={"page": 0, "per_page": 1})
ok(resp)
data = resp.json().get("data") or []
if not data:
    sys.exit("no items found")
item_id = data[0]["_id"]

print("\nAPI PATCH / GET / DELETE /items/smoke/{id}:")
ok(requests.patch(f"{API}/items/smoke/{item_id}", headers=JSON, json={"code": "PATCHED"}))
ok(requests.get(f"{API}/items/smoke/{item_id}"))
ok(requests.delete(f"{API}/items/smoke/{item_id}"))
ok(requests.get(f"{API}/items/smoke/{item_id}"))
