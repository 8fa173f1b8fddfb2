import pytest


AOPS_PAGE = r"""<!DOCTYPE html>
<html><head><title>2024 AMC 10A Problems/Problem 5</title></head>
<body>
<div id="mw-content-text"><div class="mw-parser-output">
<dl><dd>The following problem is from both the 2024 AMC 10A #5 and 2024 AMC 12A #3, so both problems redirect to this page.</dd></dl>
<div id="toc" class="toc"><ul><li><a href="#Problem">Problem</a></li></ul></div>
<h2><span class="mw-headline" id="Problem">Problem</span></h2>
<p>What is <img class="latex" alt="$1+1$" src="//latex.artofproblemsolving.com/a/b/sum.png"> equal to?</p>
<p><img class="latexcenter" alt="$\textbf{(A) }0\qquad\textbf{(B) }1\qquad\textbf{(C) }2$" src="//latex.artofproblemsolving.com/c/d/choices.png"></p>
<p><img src="/wiki/images/figure.png" alt="figure"></p>
<h2><span class="mw-headline" id="Solution_1">Solution 1</span></h2>
<p>Adding gives <img class="latex" alt="$\boxed{\textbf{(C)}}$" src="//latex.artofproblemsolving.com/e/f/boxed.png">, so the answer is (B) only if you misread.</p>
<h2><span class="mw-headline" id="Video_Solution">Video Solution</span></h2>
<p><a href="/wiki/index.php/Video">Watch</a></p>
<h2><span class="mw-headline" id="See_also">See also</span></h2>
<p><a href="/wiki/index.php/2024_AMC_10A_Problems">2024 AMC 10A Problems</a></p>
<p>Navigation footer</p>
</div></div>
</body></html>
"""


@pytest.fixture
def aops_page_html() -> str:
    return AOPS_PAGE
