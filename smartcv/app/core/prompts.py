# smartcv/app/core/prompts.py

AI_RESPONSE_FORMAT = """
interface Feedback {
  overallScore: number; // max 100
  ATS: {
    score: number; // how well the resume passes applicant tracking systems
    tips: { type: "good" | "improve"; tip: string }[]; // 3-4 tips
  };
  toneAndStyle: {
    score: number; // max 100
    tips: { type: "good" | "improve"; tip: string; explanation: string }[]; // 3-4 tips
  };
  content: {
    score: number; // max 100
    tips: { type: "good" | "improve"; tip: string; explanation: string }[]; // 3-4 tips
  };
  structure: {
    score: number; // max 100
    tips: { type: "good" | "improve"; tip: string; explanation: string }[]; // 3-4 tips
  };
  skills: {
    score: number; // max 100
    tips: { type: "good" | "improve"; tip: string; explanation: string }[]; // 3-4 tips
  };
}"""


def prepare_instructions(job_title: str, job_description: str, response_format: str = AI_RESPONSE_FORMAT) -> str:
    """Build the reviewer instruction sent along with the stored resume."""
    return (
        "You are an expert in ATS (Applicant Tracking Systems) and resume review.\n"
        "Analyze and rate this resume and suggest how to improve it.\n"
        "Scores may be low when the resume is weak; be thorough and point out mistakes and gaps.\n"
        "Use the job description of the role the user is applying for to make the feedback specific.\n"
        f"The job title is: {job_title}\n"
        f"The job description is: {job_description}\n"
        f"Provide the feedback using the following format: {response_format}\n"
        "Return the analysis as a JSON object only, with no surrounding text and no backticks."
    )
