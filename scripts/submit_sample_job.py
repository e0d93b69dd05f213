import requests
import time

BASE_URL = "http://localhost:8000"

SAMPLE_PAYLOAD = {
    "companyLogin": {"companyName": "indusweb", "password": "123"},
    "userLogin": {"username": "Admin", "password": "99811"},
    "jobDetails": {"client": "Akrati Offset", "content": "Reverse Tuck In", "quantity": 10000},
    "jobSize": {"height": 100, "length": 150, "width": 50, "oFlap": 20, "pFlap": 15},
    "material": {"quality": "Real Art Paper", "gsm": 120, "mill": "JK", "finish": "Gloss"},
    "printingDetails": {
        "frontColors": 4,
        "backColors": 0,
        "specialFront": 0,
        "specialBack": 0,
        "style": "Single Side",
        "plate": "CTP Plate",
    },
    "wastageFinishing": {
        "makeReadySheets": 100,
        "wastageType": "Standard",
        "grainDirection": "Across",
        "onlineCoating": "None",
        "trimming": "5/5/5/5",
        "striping": "0/0/0/0",
    },
}

def submit_sample_job():
    # Check health endpoint first
    health_response = requests.get(f"{BASE_URL}/health")
    print("Health check response:", health_response.json())

    print("Submitting job...")
    submit_response = requests.post(
        f"{BASE_URL}/api/jobs",
        json={"payload": SAMPLE_PAYLOAD, "subject": "Estimation request"},
    )
    job_info = submit_response.json()
    print("Job response:", job_info)

    job_id = job_info.get("job_id")
    if not job_id:
        print("No job_id received. Check the API logs for errors.")
        return

    # Poll until the job settles; retrying jobs come back on their own
    status_url = f"{BASE_URL}/api/status/{job_id}"
    while True:
        status = requests.get(status_url).json()
        print(f"Job status: {status.get('status')} (retries: {status.get('retry_count')})")
        if status.get("status") in ["completed", "failed", "cancelled"]:
            break
        time.sleep(5)

    if status.get("failed_step"):
        step = status["failed_step"]
        print(f"Failed at step {step['step_number']} ({step['description']}): {step['error_message']}")
    print("Final job status:", status.get("status"), "-", status.get("message"))

if __name__ == "__main__":
    submit_sample_job()
